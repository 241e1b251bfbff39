"""
Review Subdomain Module

Core business logic of the review pipeline: applications, reviews, users,
the status graph, role permissions and dashboard statistics.

This module is the main entry point for the review subdomain and re-exports
all public interfaces for use by Application Layer.
"""

from .entities import Application, ApplicationStatus, Review, User, UserRole
from .repositories import (
    NEWEST_FIRST,
    Collection,
    EntityStoreProtocol,
    FieldFilter,
    OrderBy,
)
from .services import (
    Action,
    FeedFilter,
    RoleAccessGuard,
    StatsCalculator,
    ViewId,
    validate_transition,
)
from .value_objects import (
    DashboardStats,
    PersonalInfo,
    ProjectDetails,
    ReviewScore,
    RoleBreakdown,
)

__all__ = [
    # Entities
    "Application",
    "ApplicationStatus",
    "Review",
    "User",
    "UserRole",
    # Value Objects
    "DashboardStats",
    "PersonalInfo",
    "ProjectDetails",
    "ReviewScore",
    "RoleBreakdown",
    # Services
    "Action",
    "FeedFilter",
    "RoleAccessGuard",
    "StatsCalculator",
    "ViewId",
    "validate_transition",
    # Repository interfaces
    "NEWEST_FIRST",
    "Collection",
    "EntityStoreProtocol",
    "FieldFilter",
    "OrderBy",
]
