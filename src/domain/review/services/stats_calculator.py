"""
StatsCalculator Domain Service

Derives DashboardStats from an application snapshot and RoleBreakdown from a
user list. Pure functions: single pass over the input, no I/O, no state.
"""

from collections import Counter
from typing import Iterable

from src.domain.review.entities.application import Application, ApplicationStatus
from src.domain.review.entities.user import User, UserRole
from src.domain.review.value_objects.dashboard_stats import DashboardStats, RoleBreakdown


class StatsCalculator:
    """
    Aggregate counters over feed snapshots.

    Examples:
        >>> StatsCalculator().compute([]).acceptance_rate
        0
    """

    def compute(self, applications: Iterable[Application]) -> DashboardStats:
        """
        Count applications per status.

        Args:
            applications: Any iterable of Application projections (consumed once)

        Returns:
            DashboardStats whose status counts sum to total_applications.
            An empty input yields all-zero counts and 0% rates.
        """
        counts: Counter[ApplicationStatus] = Counter()
        total = 0
        for application in applications:
            counts[application.status] += 1
            total += 1

        return DashboardStats(
            total_applications=total,
            pending_applications=counts[ApplicationStatus.PENDING],
            in_review_applications=counts[ApplicationStatus.IN_REVIEW],
            accepted_applications=counts[ApplicationStatus.ACCEPTED],
            rejected_applications=counts[ApplicationStatus.REJECTED],
        )

    def count_roles(self, users: Iterable[User]) -> RoleBreakdown:
        """Count users per role."""
        counts: Counter[UserRole] = Counter(user.role for user in users)
        return RoleBreakdown(
            applicants=counts[UserRole.APPLICANT],
            reviewers=counts[UserRole.REVIEWER],
            admins=counts[UserRole.ADMIN],
        )
