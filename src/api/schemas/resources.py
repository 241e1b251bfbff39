"""
Resource Schemas

HTTP representations of the review pipeline entities, shared by several
routers and by the WebSocket feed.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from src.domain.review.entities.application import Application, ApplicationStatus
from src.domain.review.entities.review import Review
from src.domain.review.entities.user import User, UserRole
from src.domain.review.value_objects.applicant_details import (
    PersonalInfo,
    ProjectDetails,
)
from src.domain.review.value_objects.dashboard_stats import DashboardStats


class UserResponse(BaseModel):
    """User profile."""

    id: str
    email: str
    name: str
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class PersonalInfoSchema(BaseModel):
    """Applicant contact section."""

    first_name: str = Field(default="", max_length=200)
    last_name: str = Field(default="", max_length=200)
    email: str = ""
    phone: str = ""
    address: str = ""
    date_of_birth: str = Field(default="", description="ISO date, e.g. 1990-05-17")

    def to_value_object(self) -> PersonalInfo:
        return PersonalInfo.from_dict(self.model_dump())

    @classmethod
    def from_value_object(cls, info: PersonalInfo) -> "PersonalInfoSchema":
        return cls.model_validate(info.to_dict())


class ProjectDetailsSchema(BaseModel):
    """Proposal section."""

    title: str = Field(default="", max_length=300)
    description: str = ""
    category: str = ""
    budget: float = Field(default=0, ge=0)
    timeline: str = ""
    objectives: list[str] = Field(default_factory=list)

    def to_value_object(self) -> ProjectDetails:
        return ProjectDetails.from_dict(self.model_dump())

    @classmethod
    def from_value_object(cls, details: ProjectDetails) -> "ProjectDetailsSchema":
        return cls.model_validate(details.to_dict())


class ApplicationResponse(BaseModel):
    """Application as seen by a principal allowed to view it."""

    id: str
    applicant_id: str
    status: ApplicationStatus
    personal_info: PersonalInfoSchema
    project_details: ProjectDetailsSchema
    file_urls: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, application: Application) -> "ApplicationResponse":
        return cls(
            id=application.id,
            applicant_id=application.applicant_id,
            status=application.status,
            personal_info=PersonalInfoSchema.from_value_object(application.personal_info),
            project_details=ProjectDetailsSchema.from_value_object(
                application.project_details
            ),
            file_urls=list(application.file_urls),
            created_at=application.created_at,
            updated_at=application.updated_at,
        )


class ReviewResponse(BaseModel):
    """One reviewer's assessment."""

    id: str
    application_id: str
    reviewer_id: str
    reviewer_name: str
    score: int = Field(ge=1, le=10)
    comments: str = ""
    private_notes: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, review: Review) -> "ReviewResponse":
        return cls(
            id=review.id,
            application_id=review.application_id,
            reviewer_id=review.reviewer_id,
            reviewer_name=review.reviewer_name,
            score=review.score.value,
            comments=review.comments,
            private_notes=review.private_notes,
            created_at=review.created_at,
        )


class FeedSnapshotMessage(BaseModel):
    """WebSocket message carrying one complete feed delivery."""

    type: Literal["snapshot"] = "snapshot"
    sequence: int
    applications: list[ApplicationResponse]
    stats: DashboardStats


class FeedErrorMessage(BaseModel):
    """WebSocket message sent before the server closes a failed feed."""

    type: Literal["error"] = "error"
    code: str
    message: str
