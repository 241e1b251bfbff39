"""
Tests for DataExportService.
"""

import json
from datetime import datetime, timezone

import pytest

from src.application.services.data_export import DataExportService
from src.domain.review.entities.application import ApplicationStatus
from src.domain.review.entities.user import UserRole
from src.domain.shared.exceptions import ForbiddenError

EXPORT_TIME = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def exporter(store, guard):
    return DataExportService(store, guard)


@pytest.mark.asyncio
async def test_export_contains_everything(exporter, seed_user, seed_application):
    await seed_user("u1")
    await seed_user("boss", UserRole.ADMIN)
    await seed_application(applicant_id="u1", status=ApplicationStatus.ACCEPTED)
    await seed_application(applicant_id="u1", status=ApplicationStatus.PENDING)

    document = await exporter.build_export(UserRole.ADMIN, now=EXPORT_TIME)

    assert len(document.applications) == 2
    assert {u["id"] for u in document.users} == {"u1", "boss"}
    assert document.stats.total_applications == 2
    assert document.stats.acceptance_rate == 50
    assert document.export_date == "2024-06-10T12:00:00.000000+00:00"


@pytest.mark.asyncio
async def test_export_json_uses_export_date_key(exporter, seed_application):
    await seed_application()

    payload = json.loads((await exporter.build_export(UserRole.ADMIN, now=EXPORT_TIME)).to_json())

    assert set(payload) == {"applications", "users", "stats", "exportDate"}
    assert payload["applications"][0]["status"] == "pending"
    assert payload["stats"]["pending_applications"] == 1


@pytest.mark.asyncio
async def test_export_of_empty_store(exporter):
    document = await exporter.build_export(UserRole.ADMIN)

    assert document.applications == []
    assert document.stats.acceptance_rate == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("role", [UserRole.APPLICANT, UserRole.REVIEWER])
async def test_only_admins_export(exporter, role):
    with pytest.raises(ForbiddenError):
        await exporter.build_export(role)


def test_filename_uses_export_day():
    assert DataExportService.filename(EXPORT_TIME) == "application-data-2024-06-10.json"
