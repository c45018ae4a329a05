"""
Database Seed Data Module

Creates the records the service needs before it can accept traffic: the
default admin account and the three singleton configuration rows. Safe to
run on every startup; existing rows are left alone.

Run with: python -m seminar.db.seed_data
"""
import asyncio

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from seminar.core.config import settings
from seminar.core.database import AsyncSessionLocal, init_db
from seminar.core.logging_config import logger
from seminar.core.security import get_password_hash
from seminar.models import AdminUser, AdminRole
from seminar.services.control_plane import ControlPlane


async def seed_admin(db: AsyncSession) -> AdminUser:
    """Create the default admin from ADMIN_* settings if it does not exist"""
    result = await db.execute(
        select(AdminUser).where(
            or_(AdminUser.username == settings.ADMIN_USERNAME, AdminUser.email == settings.ADMIN_EMAIL)
        )
    )
    admin = result.scalars().first()
    if admin is not None:
        return admin

    if not settings.ADMIN_PASSWORD and not settings.is_dev_mode():
        raise RuntimeError("ADMIN_PASSWORD must be set to create the default admin in production")

    admin = AdminUser(
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL,
        hashed_password=get_password_hash(settings.admin_bootstrap_password),
        role=AdminRole.SUPER_ADMIN,
        is_active=True,
    )
    db.add(admin)
    await db.commit()

    if not settings.ADMIN_PASSWORD:
        logger.warning(f"[Seed] Default admin '{admin.username}' created with the development password")
    else:
        logger.info(f"[Seed] Default admin '{admin.username}' created")
    return admin


async def seed_defaults(db: AsyncSession) -> None:
    """Default admin, singleton controls, and a resynced seat counter"""
    await seed_admin(db)

    control_plane = ControlPlane(db)
    await control_plane.get_registration_control()
    await control_plane.get_email_control()
    await control_plane.get_seminar_settings()

    active = await control_plane.resync_seats()
    logger.info(f"[Seed] Configuration ready ({active} active registrations)")


async def seed_all():
    """Create tables and seed defaults"""
    await init_db()
    async with AsyncSessionLocal() as db:
        await seed_defaults(db)


def main():
    asyncio.run(seed_all())


if __name__ == "__main__":
    main()
