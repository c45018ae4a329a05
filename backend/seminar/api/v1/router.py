from fastapi import APIRouter
from seminar.api.v1.endpoints import health, registration
from seminar.api.v1.endpoints.admin import admin_router

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(registration.router, prefix="/registration", tags=["Registration"])
api_router.include_router(admin_router)
