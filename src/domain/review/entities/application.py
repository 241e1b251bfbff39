"""
Application Entity.

Core domain entity: a submitted project proposal moving through the review
pipeline. Owned by the entity store; the core only ever holds read-only
projections of it, refreshed by feed deliveries or explicit reads.

The only field with a constrained value set is ``status``. Its legal changes
are defined by the status graph in
``src.domain.review.services.status_policy``, never by this entity.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from src.domain.review.value_objects.applicant_details import (
    PersonalInfo,
    ProjectDetails,
)
from src.shared.utils.timestamps import parse_timestamp, to_iso


class ApplicationStatus(str, Enum):
    """
    Lifecycle states of an Application.

    State transitions represent the review pipeline:
    PENDING -> IN_REVIEW -> {ACCEPTED, REJECTED}
    PENDING -> {ACCEPTED, REJECTED} (short-circuit)

    States:
        PENDING: Submitted, not reviewed yet
        IN_REVIEW: At least one review was submitted
        ACCEPTED: Terminal, accepted by a reviewer or admin
        REJECTED: Terminal, rejected by a reviewer or admin
    """

    PENDING = "pending"
    IN_REVIEW = "in-review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED)


@dataclass
class Application:
    """
    Read-only projection of an application record.

    Attributes:
        id: Store-assigned document id
        applicant_id: User id of the owner
        status: Current review status
        personal_info: Applicant contact section
        project_details: Proposal section
        file_urls: URLs returned by blob storage for attached documents
        created_at: Set by the store on creation, drives feed ordering
        updated_at: Refreshed by the store on every update

    Examples:
        >>> app = Application.from_dict({
        ...     "id": "a1",
        ...     "applicant_id": "u1",
        ...     "status": "in-review",
        ... })
        >>> app.status
        <ApplicationStatus.IN_REVIEW: 'in-review'>
        >>> app.is_reviewable()
        True
    """

    id: str
    applicant_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    project_details: ProjectDetails = field(default_factory=ProjectDetails)
    file_urls: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_reviewable(self) -> bool:
        """True while reviewers may still score and move the application."""
        return not self.status.is_terminal

    def is_owned_by(self, user_id: str) -> bool:
        return self.applicant_id == user_id

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize entity to a store/JSON friendly mapping.

        Returns:
            Dictionary with primitive values only (enums as values,
            datetimes as ISO strings)
        """
        return {
            "id": self.id,
            "applicant_id": self.applicant_id,
            "status": self.status.value,
            "personal_info": self.personal_info.to_dict(),
            "project_details": self.project_details.to_dict(),
            "file_urls": list(self.file_urls),
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Application":
        """
        Deserialize a store record into an Application projection.

        Args:
            data: Store record (must contain id and applicant_id)

        Returns:
            Application entity

        Raises:
            KeyError: If id or applicant_id is missing
            ValueError: If status is not a known ApplicationStatus value
        """
        return cls(
            id=data["id"],
            applicant_id=data["applicant_id"],
            status=ApplicationStatus(data.get("status", ApplicationStatus.PENDING.value)),
            personal_info=PersonalInfo.from_dict(data.get("personal_info")),
            project_details=ProjectDetails.from_dict(data.get("project_details")),
            file_urls=list(data.get("file_urls") or []),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )
