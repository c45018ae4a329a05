from pydantic_settings import BaseSettings
from typing import List, Any
import json
from pathlib import Path


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Seminar Registration"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000
    # Proxies trusted to set X-Forwarded-For (comma separated, or "*")
    FORWARDED_ALLOW_IPS: str = "127.0.0.1"

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./seminar.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    BCRYPT_ROUNDS: int = 12  # 4 for dev (fast), 12 for prod (secure)

    # Default admin account created at startup
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = ""  # Required in production
    ADMIN_EMAIL: str = "admin@seminar.com"
    DEV_ADMIN_PASSWORD: str = "admin123"

    # ==========================================
    # Two-Factor Authentication
    # ==========================================
    TWO_FACTOR_ISSUER: str = "Seminar Admin"
    TWO_FACTOR_SETUP_WINDOW_MINUTES: int = 10
    TWO_FACTOR_BACKUP_CODE_COUNT: int = 10

    # ==========================================
    # Seminar defaults (used when the settings record is first created)
    # ==========================================
    SEMINAR_TITLE: str = "Prompt Your Future: Learn Prompt Engineering & Build Your First Portfolio"
    SEMINAR_DATE: str = "2025-07-25"
    SEMINAR_TIME: str = "10:00 AM"
    SEMINAR_LOCATION: str = "Seminar Hall, First Floor, IT building."
    SEMINAR_DURATION: str = "3 hours"
    SEMINAR_DESCRIPTION: str = (
        "Join us for an exciting seminar on Prompt Engineering and build your first AI portfolio. "
        "Learn the latest techniques and best practices in AI development."
    )
    SEMINAR_INSTRUCTOR_NAME: str = "Harshad Nikam"
    SEMINAR_INSTRUCTOR_EMAIL: str = "nikamharshadshivaji@gmail.com"
    SEMINAR_MAX_PARTICIPANTS: int = 100
    WHATSAPP_NUMBER: str = "919156633236"
    WHATSAPP_GROUP_LINK: str = ""

    # ==========================================
    # Email
    # ==========================================
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    EMAIL_FROM: str = "noreply@seminar.com"
    EMAIL_FROM_NAME: str = "Seminar Team"
    NOTIFICATION_TIMEOUT_SECONDS: float = 15.0
    REMINDER_SEND_DELAY_SECONDS: float = 0.1  # Pause between reminder emails

    # ==========================================
    # Bot verification (reCAPTCHA v3)
    # ==========================================
    RECAPTCHA_ENABLED: bool = True
    RECAPTCHA_SECRET_KEY: str = ""
    RECAPTCHA_VERIFY_URL: str = "https://www.google.com/recaptcha/api/siteverify"
    RECAPTCHA_MIN_SCORE: float = 0.5
    RECAPTCHA_TIMEOUT_SECONDS: float = 5.0

    # ==========================================
    # Frontend
    # ==========================================
    FRONTEND_URL: str = "http://localhost:3000"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_PER_MINUTE: int = 100
    REGISTRATION_RATE_LIMIT: str = "10/(1 minute)"
    LOGIN_RATE_LIMIT: str = "5/(1 minute)"

    # ==========================================
    # Request limits
    # ==========================================
    MAX_REQUEST_SIZE: int = 1024 * 1024  # 1MB

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)

    @property
    def admin_bootstrap_password(self) -> str:
        """Password for the default admin; falls back to a dev password outside production"""
        return self.ADMIN_PASSWORD or self.DEV_ADMIN_PASSWORD

    @property
    def whatsapp_link(self) -> str:
        return build_whatsapp_link(self.WHATSAPP_NUMBER)

    def is_dev_mode(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT == "development" or self.DEBUG


def build_whatsapp_link(number: str) -> str:
    """wa.me deep link for a phone number (non-digits stripped)"""
    digits = "".join(ch for ch in (number or "") if ch.isdigit())
    return f"https://wa.me/{digits}"


# Create settings instance
settings = Settings()
