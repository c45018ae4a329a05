"""
Two-factor authentication management for the signed-in admin.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from seminar.core.database import get_db
from seminar.models import AdminUser
from seminar.modules.auth.dependencies import get_current_admin
from seminar.schemas.admin import BackupCodesResponse, PasswordConfirm, TwoFactorSetupResponse, TwoFactorToken
from seminar.services.two_factor_service import TwoFactorService

router = APIRouter()


@router.get("/status")
async def two_factor_status(current_admin: AdminUser = Depends(get_current_admin)):
    return {"success": True, "data": TwoFactorService.status(current_admin)}


@router.post("/setup")
async def begin_setup(
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    """Start enrollment: a temporary secret and its QR code"""
    setup = await TwoFactorService(db).begin_setup(current_admin)
    return {
        "success": True,
        "message": "Scan the QR code with your authenticator app and verify with a token",
        "data": TwoFactorSetupResponse(**setup).model_dump(mode="json"),
    }


@router.post("/verify-setup")
async def verify_setup(
    body: TwoFactorToken,
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    codes = await TwoFactorService(db).confirm_setup(current_admin, body.token)
    return {
        "success": True,
        "message": "2FA enabled successfully. Save your backup codes in a safe place.",
        "data": BackupCodesResponse(backupCodes=codes).model_dump(),
    }


@router.post("/disable")
async def disable(
    body: PasswordConfirm,
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    await TwoFactorService(db).disable(current_admin, body.password)
    return {"success": True, "message": "2FA disabled successfully"}


@router.post("/regenerate-backup-codes")
async def regenerate_backup_codes(
    body: PasswordConfirm,
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    codes = await TwoFactorService(db).regenerate_backup_codes(current_admin, body.password)
    return {
        "success": True,
        "message": "Backup codes regenerated successfully. Save them in a safe place.",
        "data": BackupCodesResponse(backupCodes=codes).model_dump(),
    }
