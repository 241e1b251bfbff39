"""
DashboardStats Value Object

Aggregate counts over the current application set, as shown on the admin and
reviewer dashboards. Never persisted: it is a pure function of a snapshot and
is recomputed on every feed delivery.

Responsibility:
    - Hold per-status counts and the total
    - Enforce that the four status counts sum to the total
    - Derive acceptance/rejection percentages without division by zero

Architecture Notes:
    - Value Object (immutable, Pydantic frozen model)
    - Rates are computed fields, so they appear in model_dump() and JSON
"""

from pydantic import BaseModel, Field, computed_field, model_validator


def _percentage(part: int, total: int) -> int:
    """Whole-number percentage of part in total, 0 when total is 0."""
    if total == 0:
        return 0
    return round(part / total * 100)


class DashboardStats(BaseModel):
    """
    Immutable per-status counts of an application set.

    Attributes:
        total_applications: Number of applications in the snapshot
        pending_applications: Applications waiting for a first review
        in_review_applications: Applications with at least one review
        accepted_applications: Applications finalized as accepted
        rejected_applications: Applications finalized as rejected

    Derived:
        acceptance_rate: round(accepted / total * 100), 0 for an empty set
        rejection_rate: round(rejected / total * 100), 0 for an empty set

    Examples:
        >>> stats = DashboardStats(
        ...     total_applications=4,
        ...     pending_applications=1,
        ...     in_review_applications=1,
        ...     accepted_applications=1,
        ...     rejected_applications=1,
        ... )
        >>> stats.acceptance_rate
        25
        >>> DashboardStats.empty().rejection_rate
        0
    """

    total_applications: int = Field(default=0, ge=0)
    pending_applications: int = Field(default=0, ge=0)
    in_review_applications: int = Field(default=0, ge=0)
    accepted_applications: int = Field(default=0, ge=0)
    rejected_applications: int = Field(default=0, ge=0)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "total_applications": 10,
                    "pending_applications": 3,
                    "in_review_applications": 2,
                    "accepted_applications": 4,
                    "rejected_applications": 1,
                    "acceptance_rate": 40,
                    "rejection_rate": 10,
                }
            ]
        },
    }

    @model_validator(mode="after")
    def validate_counts_sum_to_total(self) -> "DashboardStats":
        """
        Business rule: pending + in_review + accepted + rejected == total.

        Raises:
            ValueError: If the status counts do not add up
        """
        status_sum = (
            self.pending_applications
            + self.in_review_applications
            + self.accepted_applications
            + self.rejected_applications
        )
        if status_sum != self.total_applications:
            raise ValueError(
                f"Status counts sum to {status_sum}, "
                f"but total_applications is {self.total_applications}"
            )
        return self

    @computed_field
    @property
    def acceptance_rate(self) -> int:
        return _percentage(self.accepted_applications, self.total_applications)

    @computed_field
    @property
    def rejection_rate(self) -> int:
        return _percentage(self.rejected_applications, self.total_applications)

    @classmethod
    def empty(cls) -> "DashboardStats":
        """Stats of an empty application set (all zeros)."""
        return cls()


class RoleBreakdown(BaseModel):
    """
    Number of users holding each role.

    Attributes:
        applicants: Users with role applicant
        reviewers: Users with role reviewer
        admins: Users with role admin
    """

    applicants: int = Field(default=0, ge=0)
    reviewers: int = Field(default=0, ge=0)
    admins: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @computed_field
    @property
    def total_users(self) -> int:
        return self.applicants + self.reviewers + self.admins
