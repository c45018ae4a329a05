"""
Admin profile and password management.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from seminar.core.database import get_db
from seminar.core.exceptions import ConflictError, RegistrationValidationError
from seminar.core.logging_config import logger
from seminar.core.security import verify_password, get_password_hash
from seminar.models import AdminUser
from seminar.modules.auth.dependencies import get_current_admin
from seminar.schemas.admin import AdminProfile, PasswordChange, ProfileUpdate

router = APIRouter()


def _profile(admin: AdminUser) -> dict:
    return AdminProfile.model_validate(admin).model_dump(mode="json")


@router.get("/profile")
async def get_profile(current_admin: AdminUser = Depends(get_current_admin)):
    return {"success": True, "data": _profile(current_admin)}


@router.put("/profile")
async def update_profile(
    update: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    """Change username and email; both must stay unique across admins"""
    taken_username = await db.scalar(
        select(AdminUser.id).where(AdminUser.username == update.username, AdminUser.id != current_admin.id)
    )
    if taken_username:
        raise ConflictError("Username already exists", field="username")

    taken_email = await db.scalar(
        select(AdminUser.id).where(AdminUser.email == update.email, AdminUser.id != current_admin.id)
    )
    if taken_email:
        raise ConflictError("Email already exists", field="email")

    current_admin.username = update.username
    current_admin.email = update.email
    await db.commit()

    logger.log_auth_event("profile_update", True, username=current_admin.username)
    return {"success": True, "message": "Profile updated successfully", "data": _profile(current_admin)}


@router.put("/change-password")
async def change_password(
    change: PasswordChange,
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    if not verify_password(change.current_password, current_admin.hashed_password):
        logger.log_auth_event("password_change", False, username=current_admin.username, reason="wrong current password")
        raise RegistrationValidationError(
            [{"field": "currentPassword", "message": "Invalid password"}],
            message="Invalid password",
        )

    current_admin.hashed_password = get_password_hash(change.new_password)
    await db.commit()

    logger.log_auth_event("password_change", True, username=current_admin.username)
    return {"success": True, "message": "Password changed successfully"}
