"""
Admin control plane endpoints: registration switch, email switch, seminar settings.
"""
from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Optional

from seminar.core.database import get_db
from seminar.models import AdminUser
from seminar.modules.auth.dependencies import get_current_admin
from seminar.schemas.admin import (
    ControlResponse,
    EmailControlUpdate,
    RegistrationControlResponse,
    RegistrationControlUpdate,
)
from seminar.schemas.seminar import SeminarSettingsResponse
from seminar.services.control_plane import ControlPlane

router = APIRouter()


async def _settings_view(control_plane: ControlPlane) -> Dict[str, Any]:
    seminar = await control_plane.get_seminar_settings()
    snapshot = await control_plane.capacity_snapshot()
    view = SeminarSettingsResponse.model_validate(seminar).model_copy(update=snapshot)
    return view.model_dump(mode="json")


@router.get("/registration-control")
async def get_registration_control(
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    control = await ControlPlane(db).get_registration_control()
    return {"success": True, "data": RegistrationControlResponse.model_validate(control).model_dump(mode="json")}


@router.put("/registration-control")
async def update_registration_control(
    update: RegistrationControlUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    control = await ControlPlane(db).set_registration_control(update.enabled, update.message, actor=current_admin.id)
    return {
        "success": True,
        "message": f"Registration {'enabled' if update.enabled else 'disabled'} successfully",
        "data": RegistrationControlResponse.model_validate(control).model_dump(mode="json"),
    }


@router.get("/email-control")
async def get_email_control(
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    control = await ControlPlane(db).get_email_control()
    return {"success": True, "data": ControlResponse.model_validate(control).model_dump(mode="json")}


@router.put("/email-control")
async def update_email_control(
    update: EmailControlUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    control = await ControlPlane(db).set_email_control(update.enabled, actor=current_admin.id)
    return {
        "success": True,
        "message": f"Email service {'enabled' if update.enabled else 'disabled'} successfully",
        "data": ControlResponse.model_validate(control).model_dump(mode="json"),
    }


@router.get("/seminar-settings")
async def get_seminar_settings(
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    return {"success": True, "data": await _settings_view(ControlPlane(db))}


@router.put("/seminar-settings")
async def update_seminar_settings(
    payload: Optional[Dict[str, Any]] = Body(None),
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    """Replace the seminar settings (every field re-validated)"""
    control_plane = ControlPlane(db)
    await control_plane.set_seminar_settings(payload or {}, actor=current_admin.id)
    return {
        "success": True,
        "message": "Seminar settings updated successfully",
        "data": await _settings_view(control_plane),
    }
