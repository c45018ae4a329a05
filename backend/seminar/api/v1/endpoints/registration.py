"""
Public registration endpoints.

POST /registration runs the admission controller; the other routes are
read-only lookups used by the registration form.
"""
from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Optional

from seminar.core.database import get_db
from seminar.core.exceptions import RegistrationValidationError
from seminar.core.rate_limiter import registration_rate_limit
from seminar.schemas.registration import RegistrationPublic
from seminar.schemas.seminar import SeminarInfo
from seminar.services.admission import AdmissionController, find_active_registration
from seminar.services.bot_verification import RecaptchaVerifier, get_bot_verifier
from seminar.services.control_plane import ControlPlane
from seminar.services.email_service import EmailService, get_email_service
from seminar.services.statistics import StatisticsAggregator

router = APIRouter()


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


@router.post("", status_code=status.HTTP_201_CREATED)
@registration_rate_limit()
async def submit_registration(
    request: Request,
    payload: Optional[Dict[str, Any]] = Body(None),
    db: AsyncSession = Depends(get_db),
    verifier: RecaptchaVerifier = Depends(get_bot_verifier),
    notifier: EmailService = Depends(get_email_service),
):
    """Submit a seminar registration (rate limited)"""
    controller = AdmissionController(db, verifier, notifier)
    result = await controller.submit_registration(
        payload or {},
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=result.to_response())


@router.get("/check/{email}")
async def check_registration(email: str, db: AsyncSession = Depends(get_db)):
    """Whether an active registration exists for this email"""
    if "@" not in email:
        raise RegistrationValidationError(
            [{"field": "email", "message": "Invalid email address"}],
            message="Invalid email address",
        )

    registration = await find_active_registration(db, email)
    return {
        "success": True,
        "exists": registration is not None,
        "data": (
            RegistrationPublic.model_validate(registration).model_dump(by_alias=True, mode="json")
            if registration is not None else None
        ),
    }


@router.get("/stats")
async def public_stats(db: AsyncSession = Depends(get_db)):
    """Headline registration counts"""
    stats = StatisticsAggregator(db)
    workshop = await stats.by_workshop_choice()
    return {
        "success": True,
        "data": {
            "totalRegistrations": await stats.total_active(),
            "workshopYes": workshop["Yes"],
            "workshopNo": workshop["No"],
            "todayRegistrations": await stats.today_count(),
            "branchStats": await stats.by_branch(),
            "yearStats": await stats.by_year(),
        },
    }


@router.get("/seminar-info")
async def seminar_info(db: AsyncSession = Depends(get_db)):
    seminar = await ControlPlane(db).get_seminar_settings()
    return {"success": True, "data": SeminarInfo.model_validate(seminar).model_dump()}
