"""
Applicant Details Value Objects

The two structured sections an applicant fills in when submitting an
application: who they are (PersonalInfo) and what they propose
(ProjectDetails). Both are stored verbatim on the Application record and are
never constrained by the review workflow.
"""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class PersonalInfo:
    """
    Contact information of the applicant.

    Attributes:
        first_name: Given name
        last_name: Family name
        email: Contact email (may differ from the account email)
        phone: Contact phone number
        address: Postal address
        date_of_birth: ISO date string as entered by the applicant
    """

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    date_of_birth: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PersonalInfo":
        """Build from a stored mapping, ignoring unknown keys."""
        data = data or {}
        return cls(**{k: data[k] for k in cls.__dataclass_fields__ if k in data})


@dataclass(frozen=True)
class ProjectDetails:
    """
    The proposal being reviewed.

    Attributes:
        title: Short project title
        description: Free-form description
        category: Project category chosen by the applicant
        budget: Requested budget (non-negative)
        timeline: Free-form timeline, e.g. "6 months"
        objectives: One entry per objective line, blank lines dropped
    """

    title: str = ""
    description: str = ""
    category: str = ""
    budget: float = 0
    timeline: str = ""
    objectives: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Stored as a tuple so the value object stays hashable and immutable
        cleaned = tuple(o.strip() for o in self.objectives if o and o.strip())
        object.__setattr__(self, "objectives", cleaned)

    @classmethod
    def objectives_from_text(cls, text: str) -> tuple[str, ...]:
        """
        Split a multi-line objectives field into individual objectives.

        Examples:
            >>> ProjectDetails.objectives_from_text("Build MVP\\n\\nShip v1")
            ('Build MVP', 'Ship v1')
        """
        return tuple(line.strip() for line in text.split("\n") if line.strip())

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["objectives"] = list(self.objectives)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ProjectDetails":
        """Build from a stored mapping, ignoring unknown keys."""
        data = data or {}
        values = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
        if "objectives" in values:
            values["objectives"] = tuple(values["objectives"] or ())
        return cls(**values)
