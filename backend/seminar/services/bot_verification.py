"""
Bot verification via Google reCAPTCHA v3.

``RecaptchaVerifier.verify`` never raises: network errors, timeouts and
malformed responses all come back as a failed ``VerificationResult`` so the
admission flow can treat them as an ordinary rejection.
"""
from dataclasses import dataclass
from typing import Optional

import httpx

from seminar.core.config import settings
from seminar.core.logging_config import logger


@dataclass
class VerificationResult:
    success: bool
    score: Optional[float] = None
    reason: Optional[str] = None


class RecaptchaVerifier:
    """Verifies client tokens against the reCAPTCHA siteverify endpoint"""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        verify_url: Optional[str] = None,
        min_score: Optional[float] = None,
        timeout: Optional[float] = None,
        enabled: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = settings.RECAPTCHA_SECRET_KEY if secret_key is None else secret_key
        self.verify_url = verify_url or settings.RECAPTCHA_VERIFY_URL
        self.min_score = settings.RECAPTCHA_MIN_SCORE if min_score is None else min_score
        self.timeout = settings.RECAPTCHA_TIMEOUT_SECONDS if timeout is None else timeout
        self.enabled = settings.RECAPTCHA_ENABLED if enabled is None else enabled
        self._transport = transport

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> VerificationResult:
        if not self.enabled:
            return VerificationResult(success=True, reason="verification disabled")

        if not self.secret_key:
            logger.error("[reCAPTCHA] RECAPTCHA_SECRET_KEY is not configured")
            return VerificationResult(success=False, reason="verifier not configured")

        data = {"secret": self.secret_key, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.verify_url, data=data)
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException:
            logger.warning(f"[reCAPTCHA] Verification timed out after {self.timeout}s")
            return VerificationResult(success=False, reason="timeout")
        except httpx.HTTPError as e:
            logger.warning(f"[reCAPTCHA] Verification request failed: {e}")
            return VerificationResult(success=False, reason="network error")
        except ValueError:
            logger.warning("[reCAPTCHA] Verification returned a non-JSON body")
            return VerificationResult(success=False, reason="invalid response")

        if not isinstance(body, dict):
            return VerificationResult(success=False, reason="invalid response")

        try:
            score = float(body["score"]) if body.get("score") is not None else None
        except (TypeError, ValueError):
            score = None

        if not body.get("success"):
            codes = ", ".join(body.get("error-codes", [])) or "rejected"
            return VerificationResult(success=False, score=score, reason=codes)

        if score is None or score < self.min_score:
            return VerificationResult(success=False, score=score, reason="low score")

        return VerificationResult(success=True, score=score)


def get_bot_verifier() -> RecaptchaVerifier:
    """FastAPI dependency; overridden in tests"""
    return RecaptchaVerifier()
