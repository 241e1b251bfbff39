"""
DataExportService

Admin-only JSON export of the whole dataset: every application, every user,
dashboard stats and the export timestamp.

Output shape::

    {
        "applications": [...],
        "users": [...],
        "stats": {...},
        "exportDate": "2024-06-10T12:00:00.000000+00:00"
    }

The key ``exportDate`` is kept camel-cased so exports stay readable by the
existing admin tooling.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.domain.review.entities.application import Application
from src.domain.review.entities.user import User, UserRole
from src.domain.review.repositories.entity_store import (
    NEWEST_FIRST,
    Collection,
    EntityStoreProtocol,
)
from src.domain.review.services.role_access_guard import Action, RoleAccessGuard
from src.domain.review.services.stats_calculator import StatsCalculator
from src.domain.review.value_objects.dashboard_stats import DashboardStats
from src.shared.utils.timestamps import to_iso, utc_now

logger = logging.getLogger(__name__)


class ExportDocument(BaseModel):
    """Full-dataset export."""

    applications: list[dict[str, Any]]
    users: list[dict[str, Any]]
    stats: DashboardStats
    export_date: str = Field(alias="exportDate")

    model_config = {"populate_by_name": True, "frozen": True}

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class DataExportService:
    """
    Build exports for admins.

    Examples:
        >>> exporter = DataExportService(store, RoleAccessGuard())
        >>> document = await exporter.build_export(UserRole.ADMIN)
        >>> DataExportService.filename(document_date)
        'application-data-2024-06-10.json'
    """

    def __init__(
        self,
        store: EntityStoreProtocol,
        guard: RoleAccessGuard,
        stats_calculator: Optional[StatsCalculator] = None,
    ) -> None:
        self.store = store
        self.guard = guard
        self.stats_calculator = stats_calculator or StatsCalculator()

    async def build_export(
        self, acting_role: UserRole, now: Optional[datetime] = None
    ) -> ExportDocument:
        """
        Read applications and users and assemble the export.

        Raises:
            ForbiddenError: acting_role is not admin
            StoreUnavailableError: Store I/O failure
        """
        self.guard.require_action(acting_role, Action.EXPORT_DATA)

        application_records = await self.store.query(
            Collection.APPLICATIONS, (), NEWEST_FIRST
        )
        user_records = await self.store.query(Collection.USERS, (), NEWEST_FIRST)

        applications = [Application.from_dict(r) for r in application_records]
        users = [User.from_dict(r) for r in user_records]

        document = ExportDocument(
            applications=[a.to_dict() for a in applications],
            users=[u.to_dict() for u in users],
            stats=self.stats_calculator.compute(applications),
            export_date=to_iso(now or utc_now()),
        )
        logger.info(
            f"Export built: {len(applications)} applications, {len(users)} users"
        )
        return document

    @staticmethod
    def filename(now: Optional[datetime] = None) -> str:
        """
        Download filename of an export taken at ``now``.

        Examples:
            >>> DataExportService.filename(datetime(2024, 6, 10))
            'application-data-2024-06-10.json'
        """
        moment = now or utc_now()
        return f"application-data-{moment.date().isoformat()}.json"
