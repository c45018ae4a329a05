"""
Rate Limiting for the Seminar Registration API
==============================================
Implements rate limiting using slowapi. Storage defaults to in-process
memory; point RATE_LIMIT_STORAGE_URI at redis:// when running several
workers.

Special endpoints have their own limits:
- POST /registration: REGISTRATION_RATE_LIMIT (bot/spam protection)
- POST /admin/login, /admin/2fa/verify: LOGIN_RATE_LIMIT (brute force protection)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from seminar.core.config import settings
from seminar.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """
    Rate limit key: authenticated admin when known, otherwise client IP.

    The IP is the socket peer. Behind a reverse proxy uvicorn rewrites it
    from X-Forwarded-For, but only for FORWARDED_ALLOW_IPS.
    """
    admin_id = getattr(request.state, 'admin_id', None)
    if admin_id:
        return f"admin:{admin_id}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/(1 minute)"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.
    """
    retry_after = exc.detail.split(":")[-1].strip() if exc.detail else "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "code": "RATE_LIMITED",
            "message": "Too many requests from this IP, please try again later.",
            "detail": str(exc.detail),
        },
        headers={"Retry-After": retry_after if retry_after.isdigit() else "60"},
    )


def registration_rate_limit():
    """Rate limit for public registration submissions"""
    return limiter.limit(settings.REGISTRATION_RATE_LIMIT, key_func=get_client_identifier)


def auth_rate_limit():
    """Rate limit for admin credential endpoints"""
    return limiter.limit(settings.LOGIN_RATE_LIMIT, key_func=get_client_identifier)
