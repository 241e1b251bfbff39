"""
Review Domain Entities.

Entities have identity (a store-assigned id) and are tracked by it.

Available Entities:
    - Application / ApplicationStatus: Proposal under review and its lifecycle
    - Review: One reviewer's scored evaluation (immutable)
    - User / UserRole: Profile of a principal and its single role
"""

from src.domain.review.entities.application import Application, ApplicationStatus
from src.domain.review.entities.review import Review
from src.domain.review.entities.user import User, UserRole

__all__ = [
    "Application",
    "ApplicationStatus",
    "Review",
    "User",
    "UserRole",
]
