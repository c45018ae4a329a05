"""
Admin authentication: password login, the 2FA second step, and token checks.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime

from seminar.core.config import settings
from seminar.core.database import get_db
from seminar.core.exceptions import AuthenticationError, TwoFactorError
from seminar.core.logging_config import logger
from seminar.core.rate_limiter import auth_rate_limit
from seminar.core.security import verify_password, create_access_token
from seminar.models import AdminUser
from seminar.modules.auth.dependencies import get_current_admin
from seminar.schemas.admin import AdminLogin, AdminProfile, TwoFactorLogin
from seminar.services.two_factor_service import TwoFactorService

router = APIRouter()


async def authenticate(db: AsyncSession, username: str, password: str, client_ip: str) -> AdminUser:
    """Username + password check shared by both login steps"""
    result = await db.execute(select(AdminUser).where(AdminUser.username == username))
    admin = result.scalar_one_or_none()

    if not admin or not verify_password(password, admin.hashed_password):
        logger.log_auth_event("login", False, username=username, reason="bad credentials", client_ip=client_ip)
        raise AuthenticationError()

    if not admin.is_active:
        logger.log_auth_event("login", False, username=username, reason="inactive account", client_ip=client_ip)
        raise AuthenticationError()

    return admin


async def issue_session(db: AsyncSession, admin: AdminUser) -> dict:
    admin.last_login = datetime.utcnow()
    await db.commit()

    token = create_access_token({"sub": admin.id, "username": admin.username, "role": admin.role.value})
    return {
        "token": token,
        "tokenType": "bearer",
        "expiresIn": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "admin": {
            "id": admin.id,
            "username": admin.username,
            "email": admin.email,
            "role": admin.role.value,
        },
    }


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post("/login")
@auth_rate_limit()
async def login(request: Request, credentials: AdminLogin, db: AsyncSession = Depends(get_db)):
    """Password login (rate limited). Accounts with 2FA get a challenge instead of a token."""
    client_ip = _client_ip(request)
    admin = await authenticate(db, credentials.username, credentials.password, client_ip)

    if admin.two_factor_enabled:
        logger.log_auth_event("login", True, username=admin.username, reason="2fa required", client_ip=client_ip)
        return {
            "success": True,
            "message": "2FA verification required",
            "requires2FA": True,
            "username": admin.username,
        }

    data = await issue_session(db, admin)
    logger.log_auth_event("login", True, username=admin.username, client_ip=client_ip)
    return {"success": True, "message": "Login successful", "data": data}


@router.post("/2fa/verify")
@auth_rate_limit()
async def verify_two_factor(request: Request, credentials: TwoFactorLogin, db: AsyncSession = Depends(get_db)):
    """Second login step: TOTP code or a single-use backup code"""
    client_ip = _client_ip(request)
    admin = await authenticate(db, credentials.username, credentials.password, client_ip)

    if not admin.two_factor_enabled:
        raise TwoFactorError("2FA is not enabled for this account")

    remaining_before = len(admin.backup_codes or [])
    if not await TwoFactorService(db).verify_login_token(admin, credentials.token):
        logger.log_auth_event("2fa_verify", False, username=admin.username, reason="bad token", client_ip=client_ip)
        raise AuthenticationError("Invalid 2FA token")

    remaining_after = len(admin.backup_codes or [])
    used_backup_code = remaining_after < remaining_before

    data = await issue_session(db, admin)
    data["usedBackupCode"] = used_backup_code
    if used_backup_code:
        data["remainingBackupCodes"] = remaining_after

    logger.log_auth_event("2fa_verify", True, username=admin.username, client_ip=client_ip)
    return {"success": True, "message": "2FA verification successful", "data": data}


@router.get("/verify")
async def verify_token(current_admin: AdminUser = Depends(get_current_admin)):
    """Validate the bearer token and return the admin it belongs to"""
    return {
        "success": True,
        "data": {"admin": AdminProfile.model_validate(current_admin).model_dump(mode="json")},
    }
