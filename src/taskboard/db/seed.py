"""Seed script for populating development data."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from ..core.config import get_settings
from ..core.logging import configure_logging
from ..models import TaskPriority, TaskStatus, UserRole, utcnow
from ..repositories import TaskRepository
from ..schemas import TaskCreate
from ..services import TaskService, UserService
from .session import async_session_maker, init_db

logger = logging.getLogger(__name__)

_DEMO_TASKS = (
    TaskCreate(
        title="Set up local environment",
        description="Install dependencies and run the application.",
        status=TaskStatus.DONE,
        priority=TaskPriority.LOW,
    ),
    TaskCreate(
        title="Review access policies",
        description="Check which routes are admin only.",
        status=TaskStatus.IN_PROGRESS,
        priority=TaskPriority.HIGH,
    ),
    TaskCreate(
        title="Write the weekly report",
        description="Summarise progress for the team.",
        priority=TaskPriority.MEDIUM,
        due_date=utcnow() + timedelta(days=7),
    ),
)


async def seed() -> None:
    """Create the admin account from settings plus a few demo tasks.

    Registration always grants the ``user`` role, so this is the way to obtain
    the first admin. Running it twice is harmless.
    """
    settings = get_settings()
    await init_db()
    async with async_session_maker() as session:
        user_service = UserService(session)
        task_service = TaskService(session)

        admin = await user_service.get_user_by_email(settings.seed_admin_email)
        if admin is None:
            admin = await user_service.create_user(
                email=settings.seed_admin_email,
                password=settings.seed_admin_password,
                first_name="Admin",
                last_name="User",
                role=UserRole.ADMIN,
            )
            logger.info("Created admin account", extra={"email": admin.email})

        _, existing_total = await TaskRepository(session).list_filtered(owner_id=admin.id, limit=1)
        if existing_total:
            return

        for payload in _DEMO_TASKS:
            await task_service.create(payload, admin)
        logger.info("Seeded demo tasks", extra={"count": len(_DEMO_TASKS)})


def main() -> None:
    """Console entry point for ``taskboard-seed``."""
    configure_logging(get_settings())
    asyncio.run(seed())


if __name__ == "__main__":  # pragma: no cover - manual execution entry-point
    main()
