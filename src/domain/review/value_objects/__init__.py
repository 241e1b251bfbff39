"""
Review Value Objects.

Immutable objects that represent review-pipeline concepts by value.

Available Value Objects:
    - ReviewScore: Integer score 1-10
    - PersonalInfo / ProjectDetails: Applicant-entered sections of an application
    - DashboardStats: Per-status counts and derived rates
    - RoleBreakdown: User counts per role
"""

from src.domain.review.value_objects.applicant_details import (
    PersonalInfo,
    ProjectDetails,
)
from src.domain.review.value_objects.dashboard_stats import (
    DashboardStats,
    RoleBreakdown,
)
from src.domain.review.value_objects.review_score import (
    MAX_SCORE,
    MIN_SCORE,
    ReviewScore,
)

__all__ = [
    "DashboardStats",
    "MAX_SCORE",
    "MIN_SCORE",
    "PersonalInfo",
    "ProjectDetails",
    "ReviewScore",
    "RoleBreakdown",
]
