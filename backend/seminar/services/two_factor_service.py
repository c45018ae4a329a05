"""
Two-factor authentication for admin accounts.

TOTP (RFC 6238) via pyotp, provisioning QR codes rendered as SVG data URLs,
and single-use backup codes.
"""
import base64
import io
import secrets
import string
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

import pyotp
import qrcode
from qrcode.constants import ERROR_CORRECT_M
from qrcode.image.svg import SvgPathImage
from sqlalchemy.ext.asyncio import AsyncSession

from seminar.core.config import settings
from seminar.core.exceptions import TwoFactorError
from seminar.core.logging_config import logger
from seminar.core.security import verify_password
from seminar.models import AdminUser

BACKUP_CODE_LENGTH = 8
_BACKUP_ALPHABET = string.ascii_uppercase + string.digits

LOGIN_WINDOW = 1
SETUP_WINDOW = 2


def generate_secret() -> str:
    return pyotp.random_base32()


def provisioning_uri(secret: str, account_name: str) -> str:
    return pyotp.TOTP(secret).provisioning_uri(name=account_name, issuer_name=settings.TWO_FACTOR_ISSUER)


def qr_code_data_url(data: str) -> str:
    """Render ``data`` as a QR code and return it as an SVG data URL"""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=10, border=2)
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(image_factory=SvgPathImage)
    buffer = io.BytesIO()
    img.save(buffer)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def verify_totp(secret: Optional[str], token: Optional[str], window: int = LOGIN_WINDOW) -> bool:
    if not secret or not token:
        return False
    token = token.strip()
    if len(token) != 6 or not token.isdigit():
        return False
    return pyotp.TOTP(secret).verify(token, valid_window=window)


def generate_backup_codes(count: Optional[int] = None) -> List[str]:
    count = count or settings.TWO_FACTOR_BACKUP_CODE_COUNT
    return [
        "".join(secrets.choice(_BACKUP_ALPHABET) for _ in range(BACKUP_CODE_LENGTH))
        for _ in range(count)
    ]


def consume_backup_code(codes: Optional[List[str]], candidate: str) -> Tuple[bool, List[str]]:
    """
    Match ``candidate`` case-insensitively against ``codes``.

    Returns (matched, remaining codes). A matched code is removed.
    """
    remaining = list(codes or [])
    normalized = (candidate or "").strip().upper()
    if not normalized.isascii() or not normalized.isalnum():
        return False, remaining
    for code in remaining:
        if secrets.compare_digest(code.upper(), normalized):
            remaining.remove(code)
            return True, remaining
    return False, remaining


class TwoFactorService:
    """Setup, verification and teardown of an admin's second factor"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def begin_setup(self, admin: AdminUser, now: Optional[datetime] = None) -> dict:
        if admin.two_factor_enabled:
            raise TwoFactorError("2FA is already enabled. Disable it first to regenerate.")

        now = now or datetime.utcnow()
        secret = generate_secret()
        admin.temp_secret = secret
        admin.temp_secret_expires = now + timedelta(minutes=settings.TWO_FACTOR_SETUP_WINDOW_MINUTES)
        await self.db.commit()

        logger.log_auth_event("2fa_setup_started", True, username=admin.username)
        return {
            "qrCode": qr_code_data_url(provisioning_uri(secret, admin.email)),
            "manualEntryKey": secret,
            "expiresAt": admin.temp_secret_expires,
        }

    async def confirm_setup(self, admin: AdminUser, token: str, now: Optional[datetime] = None) -> List[str]:
        now = now or datetime.utcnow()
        if not admin.temp_secret or not admin.temp_secret_expires or admin.temp_secret_expires < now:
            if admin.temp_secret is not None or admin.temp_secret_expires is not None:
                admin.temp_secret = None
                admin.temp_secret_expires = None
                await self.db.commit()
            raise TwoFactorError("Setup session expired. Please start setup again.")

        if not verify_totp(admin.temp_secret, token, window=SETUP_WINDOW):
            logger.log_auth_event("2fa_setup_verify", False, username=admin.username, reason="bad token")
            raise TwoFactorError("Invalid token. Please try again.")

        codes = generate_backup_codes()
        admin.two_factor_secret = admin.temp_secret
        admin.two_factor_enabled = True
        admin.backup_codes = codes
        admin.temp_secret = None
        admin.temp_secret_expires = None
        await self.db.commit()

        logger.log_auth_event("2fa_enabled", True, username=admin.username)
        return codes

    def _require_password(self, admin: AdminUser, password: str) -> None:
        if not verify_password(password, admin.hashed_password):
            logger.log_auth_event("2fa_password_confirm", False, username=admin.username, reason="bad password")
            raise TwoFactorError("Invalid password")

    async def disable(self, admin: AdminUser, password: str) -> None:
        self._require_password(admin, password)
        if not admin.two_factor_enabled:
            raise TwoFactorError("2FA is not enabled")

        admin.two_factor_enabled = False
        admin.two_factor_secret = None
        admin.backup_codes = None
        admin.temp_secret = None
        admin.temp_secret_expires = None
        await self.db.commit()
        logger.log_auth_event("2fa_disabled", True, username=admin.username)

    async def regenerate_backup_codes(self, admin: AdminUser, password: str) -> List[str]:
        self._require_password(admin, password)
        if not admin.two_factor_enabled:
            raise TwoFactorError("2FA is not enabled")

        codes = generate_backup_codes()
        admin.backup_codes = codes
        await self.db.commit()
        logger.log_auth_event("2fa_backup_codes_regenerated", True, username=admin.username)
        return codes

    async def verify_login_token(self, admin: AdminUser, token: str) -> bool:
        """TOTP first, then a backup code (consumed on success)"""
        if verify_totp(admin.two_factor_secret, token):
            return True

        matched, remaining = consume_backup_code(admin.backup_codes, token)
        if matched:
            admin.backup_codes = remaining
            await self.db.commit()
            logger.info(
                f"[2FA] Backup code used by {admin.username}; {len(remaining)} remaining",
                extra={"event_type": "auth", "auth_event": "backup_code_used"},
            )
        return matched

    @staticmethod
    def status(admin: AdminUser) -> dict:
        return {
            "enabled": bool(admin.two_factor_enabled),
            "backupCodesRemaining": len(admin.backup_codes or []),
        }
