"""
Admin registration management endpoints.
"""
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Optional

from seminar.core.database import get_db
from seminar.models import AdminUser, RegistrationStatus
from seminar.modules.auth.dependencies import get_current_admin
from seminar.schemas.registration import RegistrationAdminView
from seminar.services.registration_admin import RegistrationAdmin

router = APIRouter()


def _view(registration) -> Dict[str, Any]:
    return RegistrationAdminView.model_validate(registration).model_dump(by_alias=True, mode="json")


@router.get("")
async def list_registrations(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    sort_by: str = Query("registrationDate", alias="sortBy",
                         pattern="^(registrationDate|fullName|email|branch|yearOfStudy)$"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    status: RegistrationStatus = Query(RegistrationStatus.ACTIVE),
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    """List registrations with search, sorting and pagination"""
    result = await RegistrationAdmin(db).list_page(page, limit, search, sort_by, sort_order, status)
    return {
        "success": True,
        "data": {
            "registrations": [_view(r) for r in result["registrations"]],
            "pagination": result["pagination"],
        },
    }


@router.get("/{registration_id}")
async def get_registration(
    registration_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    registration = await RegistrationAdmin(db).get(registration_id)
    return {"success": True, "data": _view(registration)}


@router.put("/{registration_id}")
async def update_registration(
    registration_id: str,
    payload: Optional[Dict[str, Any]] = Body(None),
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    registration = await RegistrationAdmin(db).update(registration_id, payload or {}, actor=current_admin.id)
    return {"success": True, "message": "Registration updated successfully", "data": _view(registration)}


@router.delete("/{registration_id}")
async def delete_registration(
    registration_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: AdminUser = Depends(get_current_admin)
):
    """Soft delete: the row is kept with status=removed and its seat is freed"""
    await RegistrationAdmin(db).soft_delete(registration_id, actor=current_admin.id)
    return {"success": True, "message": "Registration deleted successfully"}
