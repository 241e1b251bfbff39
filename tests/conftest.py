"""
Pytest Configuration and Shared Fixtures

This module contains pytest configuration and shared fixtures used across
all unit test suites.

Fixtures:
    - store: Fresh InMemoryEntityStore per test
    - guard: RoleAccessGuard with the default permission table
    - make_application: Build Application projections without a store
    - seed_user: Coroutine factory storing a user profile
    - seed_application: Coroutine factory storing an application

Architecture Notes:
    - No external services: every store is in-memory, Redis is mocked
    - Seeding helpers return coroutine functions so sync fixtures can serve
      async tests under pytest-asyncio strict mode

Usage:
    @pytest.mark.asyncio
    async def test_something(store, seed_user):
        reviewer = await seed_user("r1", UserRole.REVIEWER)
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from src.domain.review.entities.application import Application, ApplicationStatus
from src.domain.review.entities.user import User, UserRole
from src.domain.review.repositories.entity_store import Collection
from src.domain.review.services.role_access_guard import RoleAccessGuard
from src.domain.review.value_objects.applicant_details import (
    PersonalInfo,
    ProjectDetails,
)
from src.infrastructure.persistence.memory import InMemoryEntityStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

BASE_TIME = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# DOMAIN FIXTURES
# ============================================================================


@pytest.fixture
def guard() -> RoleAccessGuard:
    return RoleAccessGuard()


@pytest.fixture
def make_application():
    """
    Factory for Application projections.

    Each call gets a created_at one minute after the previous one, so later
    calls are "newer".
    """
    counter = {"n": 0}

    def _make(
        status: ApplicationStatus = ApplicationStatus.PENDING,
        applicant_id: str = "applicant-1",
        app_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Application:
        counter["n"] += 1
        return Application(
            id=app_id or f"app-{counter['n']}",
            applicant_id=applicant_id,
            status=status,
            personal_info=PersonalInfo(first_name="Ada", last_name="Lovelace"),
            project_details=ProjectDetails(title=f"Project {counter['n']}"),
            created_at=created_at or BASE_TIME + timedelta(minutes=counter["n"]),
        )

    return _make


# ============================================================================
# STORE FIXTURES
# ============================================================================


@pytest.fixture
def store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def seed_user(store):
    """Coroutine factory: store a user profile and return the User entity."""

    async def _seed(
        user_id: str,
        role: UserRole = UserRole.APPLICANT,
        name: Optional[str] = None,
    ) -> User:
        await store.put(
            Collection.USERS,
            user_id,
            {
                "email": f"{user_id}@example.com",
                "name": name or user_id.title(),
                "role": role.value,
            },
        )
        return User.from_dict(await store.get_by_id(Collection.USERS, user_id))

    return _seed


@pytest.fixture
def seed_application(store):
    """Coroutine factory: store an application and return its id."""

    async def _seed(
        applicant_id: str = "applicant-1",
        status: ApplicationStatus = ApplicationStatus.PENDING,
        title: str = "Solar roof for the library",
    ) -> str:
        return await store.create(
            Collection.APPLICATIONS,
            {
                "applicant_id": applicant_id,
                "status": status.value,
                "personal_info": PersonalInfo(first_name="Ada").to_dict(),
                "project_details": ProjectDetails(title=title, budget=5000).to_dict(),
                "file_urls": [],
            },
        )

    return _seed
