"""
Domain Layer - Core Business Logic

Heart of the review pipeline. Contains the business rules, entities, value
objects and domain services. Framework-independent and highly testable.

Architecture:
    - Clean Architecture: Domain Layer is the center, no external dependencies
      besides pydantic for value objects
    - Domain-Driven Design: Entities, Value Objects, Services, Repositories
    - Dependency Inversion: Domain defines interfaces, Infrastructure implements

Subdomains:
    - review: Applications, reviews, users, status graph, role permissions
    - shared: Cross-subdomain concepts (exceptions)

Usage:
    >>> from src.domain import Application, ApplicationStatus, DomainException
    >>> from src.domain.review.services import RoleAccessGuard
"""

# Review Subdomain
from .review import (
    Application,
    ApplicationStatus,
    Collection,
    DashboardStats,
    EntityStoreProtocol,
    Review,
    ReviewScore,
    RoleAccessGuard,
    User,
    UserRole,
)

# Shared Domain
from .shared import DomainException

__all__ = [
    # Review Subdomain
    "Application",
    "ApplicationStatus",
    "Collection",
    "DashboardStats",
    "EntityStoreProtocol",
    "Review",
    "ReviewScore",
    "RoleAccessGuard",
    "User",
    "UserRole",
    # Shared Domain
    "DomainException",
]
