"""
ApplicationQueryService

One-shot, role-filtered reads of the applications collection: the request /
response counterpart of RealtimeFeed.

Visibility is the same as the live feed (RoleAccessGuard.feed_filter):
applicants see their own applications, reviewers see pending and in-review
ones, admins see everything. An application outside the caller's
visibility is reported as not found.
"""

import logging
from typing import Optional

from src.domain.review.entities.application import Application, ApplicationStatus
from src.domain.review.entities.user import User
from src.domain.review.repositories.entity_store import (
    NEWEST_FIRST,
    Collection,
    EntityStoreProtocol,
)
from src.domain.review.services.role_access_guard import RoleAccessGuard, ViewId
from src.domain.review.services.stats_calculator import StatsCalculator
from src.domain.review.value_objects.dashboard_stats import DashboardStats, RoleBreakdown
from src.domain.shared.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class ApplicationQueryService:
    """
    Read applications and dashboard stats on behalf of a principal.

    Examples:
        >>> queries = ApplicationQueryService(store, RoleAccessGuard())
        >>> pending = await queries.list_visible(admin, ApplicationStatus.PENDING)
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

    async def list_visible(
        self, user: User, status: Optional[ApplicationStatus] = None
    ) -> list[Application]:
        """
        Applications the user may see, created_at descending.

        Args:
            user: Calling principal
            status: Optional status filter applied on top of visibility
        """
        feed_filter = self.guard.feed_filter(user.role, user.id)
        records = await self.store.query(
            Collection.APPLICATIONS, feed_filter.predicates, NEWEST_FIRST
        )
        applications = [Application.from_dict(r) for r in records]
        if feed_filter.client_filter is not None:
            applications = [a for a in applications if feed_filter.client_filter(a)]
        if status is not None:
            status = ApplicationStatus(status)
            applications = [a for a in applications if a.status == status]

        logger.debug(
            f"{user.role.value} {user.id} listed {len(applications)} applications"
        )
        return applications

    async def get_visible(self, user: User, application_id: str) -> Application:
        """
        Raises:
            NotFoundError: Application absent or outside the user's visibility
        """
        record = await self.store.get_by_id(Collection.APPLICATIONS, application_id)
        application = Application.from_dict(record) if record is not None else None
        if application is None or not self.guard.can_view_application(
            user.role, user.id, application
        ):
            raise NotFoundError(
                f"Application {application_id} not found",
                collection=Collection.APPLICATIONS.value,
                entity_id=application_id,
            )
        return application

    async def dashboard_stats(self, user: User) -> DashboardStats:
        """
        Stats over the applications the user may see.

        Raises:
            ForbiddenError: The role has no stats view (applicants)
        """
        self.guard.require_view(user.role, ViewId.STATS)
        return self.stats_calculator.compute(await self.list_visible(user))

    async def role_breakdown(self, user: User) -> RoleBreakdown:
        """
        Users per role.

        Raises:
            ForbiddenError: The role has no users view (non-admins)
        """
        self.guard.require_view(user.role, ViewId.USERS)
        records = await self.store.query(Collection.USERS, (), NEWEST_FIRST)
        return self.stats_calculator.count_roles(User.from_dict(r) for r in records)
