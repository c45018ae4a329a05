"""
Seminar Registration - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, List, Optional
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_seminar.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['RECAPTCHA_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''
os.environ['REMINDER_SEND_DELAY_SECONDS'] = '0'

from seminar.main import app
from seminar.core.database import Base, get_db
from seminar.core.security import get_password_hash, create_access_token
from seminar.models import AdminUser, AdminRole
from seminar.services.bot_verification import VerificationResult, get_bot_verifier
from seminar.services.control_plane import ControlPlane
from seminar.services.email_service import NotificationResult, get_email_service

fake = Faker()

ADMIN_PASSWORD = 'adminpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_seminar.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


class FakeVerifier:
    """Bot verifier that accepts or rejects every token"""

    def __init__(self, accept: bool = True):
        self.accept = accept
        self.tokens: List[str] = []

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> VerificationResult:
        self.tokens.append(token)
        if self.accept:
            return VerificationResult(success=True, score=0.9)
        return VerificationResult(success=False, score=0.1, reason="low score")


class FakeNotifier:
    """Email gateway that records sends instead of talking to SMTP"""

    def __init__(self, fail: bool = False, error: Optional[Exception] = None):
        self.fail = fail
        self.error = error
        self.welcome: List[str] = []
        self.reminders: List[str] = []

    async def _send(self, bucket: List[str], registration) -> NotificationResult:
        if self.error is not None:
            raise self.error
        if self.fail:
            return NotificationResult.failed("smtp unavailable")
        bucket.append(registration.email)
        return NotificationResult.ok()

    async def send_welcome_email(self, registration, seminar) -> NotificationResult:
        return await self._send(self.welcome, registration)

    async def send_reminder_email(self, registration, seminar) -> NotificationResult:
        return await self._send(self.reminders, registration)


@pytest_asyncio.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh schema and seeded configuration rows for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        control_plane = ControlPlane(session)
        await control_plane.get_registration_control()
        await control_plane.get_email_control()
        await control_plane.get_seminar_settings()
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    verifier: FakeVerifier,
    notifier: FakeNotifier,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and gateway overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_bot_verifier] = lambda: verifier
    app.dependency_overrides[get_email_service] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> AdminUser:
    """Create an admin test user"""
    admin = AdminUser(
        username='seminar-admin',
        email=fake.email(),
        hashed_password=get_password_hash(ADMIN_PASSWORD),
        role=AdminRole.ADMIN,
        is_active=True,
    )
    db_session.add(admin)
    await db_session.commit()
    await db_session.refresh(admin)
    return admin


@pytest.fixture
def admin_auth_headers(admin_user: AdminUser) -> dict:
    """Generate authentication headers for the admin user"""
    token_data = {
        'sub': str(admin_user.id),
        'username': admin_user.username,
        'role': admin_user.role.value
    }
    token = create_access_token(token_data)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def registration_payload():
    """Factory for a valid public registration body"""
    def _make(**overrides) -> dict:
        payload = {
            'fullName': 'Asha Patil',
            'email': fake.unique.email(),
            'phone': '9876543210',
            'branch': 'IT',
            'yearOfStudy': '2nd Year',
            'workshopAttendance': 'Yes',
            'githubUsername': 'asha-dev',
            'consent': True,
            'verificationToken': 'test-token',
        }
        payload.update(overrides)
        return payload
    return _make
