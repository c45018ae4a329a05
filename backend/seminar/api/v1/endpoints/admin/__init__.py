"""
Admin API endpoints for the seminar dashboard.
Everything except /login and /2fa/verify requires an admin bearer token.
"""
from fastapi import APIRouter

from seminar.api.v1.endpoints.admin import auth, registrations, controls, reports, profile, two_factor

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(auth.router, tags=["Admin Auth"])
admin_router.include_router(registrations.router, prefix="/registrations", tags=["Admin Registrations"])
admin_router.include_router(controls.router, tags=["Admin Controls"])
admin_router.include_router(reports.router, tags=["Admin Reports"])
admin_router.include_router(profile.router, tags=["Admin Profile"])
admin_router.include_router(two_factor.router, prefix="/2fa", tags=["Admin 2FA"])
