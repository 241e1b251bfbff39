"""
API Schemas Package

Contains shared Pydantic models for API Layer.
"""

from src.api.schemas.common import ErrorResponse
from src.api.schemas.resources import (
    ApplicationResponse,
    FeedErrorMessage,
    FeedSnapshotMessage,
    PersonalInfoSchema,
    ProjectDetailsSchema,
    ReviewResponse,
    UserResponse,
)

__all__ = [
    "ApplicationResponse",
    "ErrorResponse",
    "FeedErrorMessage",
    "FeedSnapshotMessage",
    "PersonalInfoSchema",
    "ProjectDetailsSchema",
    "ReviewResponse",
    "UserResponse",
]
