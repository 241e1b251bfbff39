"""
Review Entity.

One reviewer's scored evaluation of one application. Append-only: once
created a review is never updated or deleted. Reviewer identity is copied
onto the review at creation time and never refreshed.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from src.domain.review.value_objects.review_score import ReviewScore
from src.shared.utils.timestamps import parse_timestamp, to_iso


@dataclass(frozen=True)
class Review:
    """
    Immutable review record.

    Attributes:
        id: Store-assigned document id
        application_id: Reviewed application
        reviewer_id: User id of the reviewer
        reviewer_name: Reviewer display name at the time of review
        score: Integer score 1-10
        comments: Feedback meant for the decision makers
        private_notes: Notes visible to reviewers and admins only
        created_at: Set by the store on creation
    """

    id: str
    application_id: str
    reviewer_id: str
    reviewer_name: str
    score: ReviewScore
    comments: str = ""
    private_notes: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "application_id": self.application_id,
            "reviewer_id": self.reviewer_id,
            "reviewer_name": self.reviewer_name,
            "score": self.score.value,
            "comments": self.comments,
            "private_notes": self.private_notes,
            "created_at": to_iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Review":
        """
        Deserialize a store record.

        Raises:
            KeyError: If a required id field is missing
            InvalidScoreError: If the stored score is out of range
        """
        return cls(
            id=data["id"],
            application_id=data["application_id"],
            reviewer_id=data["reviewer_id"],
            reviewer_name=data.get("reviewer_name", ""),
            score=ReviewScore(data["score"]),
            comments=data.get("comments", ""),
            private_notes=data.get("private_notes", ""),
            created_at=parse_timestamp(data.get("created_at")),
        )
