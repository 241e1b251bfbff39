"""
User Entity.

A principal known to the review pipeline. Identity (the id) comes from the
external identity provider; this entity only holds the profile and the single
role that drives every permission decision.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from src.shared.utils.timestamps import parse_timestamp, to_iso


class UserRole(str, Enum):
    """
    Role of a user. Exactly one role at a time.

    Roles:
        APPLICANT: Submits applications and follows their status
        REVIEWER: Scores applications and moves them through review
        ADMIN: Sees everything, finalizes dispositions, manages roles
    """

    APPLICANT = "applicant"
    REVIEWER = "reviewer"
    ADMIN = "admin"


@dataclass
class User:
    """
    User profile stored in the ``users`` collection.

    Attributes:
        id: Identity-provider user id (also the document id)
        email: Account email
        name: Display name, denormalized onto reviews at creation time
        role: Current role
        created_at: Set by the store on creation
        updated_at: Refreshed by the store on every update

    Examples:
        >>> user = User.from_dict({"id": "u1", "email": "a@b.c", "name": "Ada", "role": "reviewer"})
        >>> user.role
        <UserRole.REVIEWER: 'reviewer'>
    """

    id: str
    email: str
    name: str
    role: UserRole = UserRole.APPLICANT
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a store/JSON friendly mapping."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """
        Deserialize a store record.

        Raises:
            KeyError: If id is missing
            ValueError: If role is not a known UserRole value
        """
        return cls(
            id=data["id"],
            email=data.get("email", ""),
            name=data.get("name", ""),
            role=UserRole(data.get("role", UserRole.APPLICANT.value)),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )
