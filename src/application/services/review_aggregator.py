"""
ReviewAggregator Application Service

Creates reviews, links them to an application and moves a pending
application into review on its first review.

Responsibility:
    - Validate the score before any I/O
    - Append the Review record
    - Trigger pending -> in-review through StatusStateMachine (best effort)
    - List an application's reviews newest first, capped

Non-atomic sequence:
    "create review" and "maybe transition status" are two separate store
    writes. The review can be durably created while the transition fails or
    loses a race with a concurrent status change (e.g. an admin rejects the
    application in between). That outcome is accepted: the failure is logged
    as a warning and the review id is still returned.

Duplicates:
    A reviewer may submit any number of reviews for the same application.
    No "already reviewed" guard exists.
"""

import logging
import os
from typing import Iterable, Optional

from src.domain.review.entities.application import Application, ApplicationStatus
from src.domain.review.entities.review import Review
from src.domain.review.entities.user import UserRole
from src.domain.review.repositories.entity_store import (
    NEWEST_FIRST,
    Collection,
    EntityStoreProtocol,
    FieldFilter,
)
from src.domain.review.value_objects.review_score import ReviewScore
from src.domain.shared.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    StoreUnavailableError,
)
from src.application.services.status_state_machine import StatusStateMachine

logger = logging.getLogger(__name__)

DEFAULT_REVIEW_LIMIT = 200


class ReviewAggregator:
    """
    Multi-reviewer review model over the ``reviews`` collection.

    Examples:
        >>> aggregator = ReviewAggregator(store, state_machine)
        >>> review_id = await aggregator.submit(
        ...     application_id="a1",
        ...     reviewer_id="r1",
        ...     reviewer_name="Rita Reviewer",
        ...     score=8,
        ...     comments="Strong proposal",
        ...     private_notes="Check budget",
        ... )
        >>> reviews = await aggregator.list_for("a1")
    """

    def __init__(
        self,
        store: EntityStoreProtocol,
        state_machine: StatusStateMachine,
        list_limit: Optional[int] = None,
    ) -> None:
        """
        Args:
            store: Entity store holding applications and reviews
            state_machine: Used for the first-review transition
            list_limit: Max reviews returned by list_for (default from env:
                REVIEW_LIST_LIMIT or 200)
        """
        self.store = store
        self.state_machine = state_machine
        self.list_limit = list_limit or int(
            os.getenv("REVIEW_LIST_LIMIT", str(DEFAULT_REVIEW_LIMIT))
        )

    async def submit(
        self,
        application_id: str,
        reviewer_id: str,
        reviewer_name: str,
        score: int,
        comments: str = "",
        private_notes: str = "",
    ) -> str:
        """
        Create a review and move a pending application into review.

        Process Flow:
            1. Validate score (InvalidScoreError, nothing written)
            2. Read the application (NotFoundError, nothing written)
            3. Create the Review record
            4. If the application was pending: transition to in-review as a
               reviewer; failures of this step are logged, not raised

        Args:
            application_id: Reviewed application
            reviewer_id: User id of the reviewer
            reviewer_name: Display name copied onto the review
            score: Integer 1-10
            comments: Feedback for the decision makers
            private_notes: Reviewer-only notes

        Returns:
            Id of the created review

        Raises:
            InvalidScoreError: Score not an integer in [1, 10]
            NotFoundError: Application does not exist
            StoreUnavailableError: Store failure before the review was created
        """
        validated = ReviewScore(score)

        record = await self.store.get_by_id(Collection.APPLICATIONS, application_id)
        if record is None:
            raise NotFoundError(
                f"Application {application_id} not found",
                collection=Collection.APPLICATIONS.value,
                entity_id=application_id,
            )
        application = Application.from_dict(record)

        review_id = await self.store.create(
            Collection.REVIEWS,
            {
                "application_id": application_id,
                "reviewer_id": reviewer_id,
                "reviewer_name": reviewer_name,
                "score": validated.value,
                "comments": comments,
                "private_notes": private_notes,
            },
        )
        logger.info(
            f"Review {review_id} created for application {application_id} "
            f"by {reviewer_id} (score {validated.value})"
        )

        if application.status == ApplicationStatus.PENDING:
            await self._start_review(application_id)

        return review_id

    async def _start_review(self, application_id: str) -> None:
        """First-review transition; re-reads the application to narrow the race."""
        try:
            await self.state_machine.apply_by_id(
                application_id, ApplicationStatus.IN_REVIEW, UserRole.REVIEWER
            )
        except (InvalidTransitionError, NotFoundError, StoreUnavailableError) as e:
            logger.warning(
                f"Review stored but application {application_id} was not moved "
                f"to in-review: {e}"
            )

    async def list_for(self, application_id: str, limit: Optional[int] = None) -> list[Review]:
        """
        Reviews of one application, newest first.

        Args:
            application_id: Application whose reviews to list
            limit: Max number of reviews (default: self.list_limit)

        Returns:
            At most ``limit`` reviews ordered by created_at descending
        """
        records = await self.store.query(
            Collection.REVIEWS,
            [FieldFilter.eq("application_id", application_id)],
            NEWEST_FIRST,
        )
        cap = limit or self.list_limit
        if len(records) > cap:
            logger.debug(
                f"Application {application_id} has {len(records)} reviews; "
                f"returning newest {cap}"
            )
        return [Review.from_dict(r) for r in records[:cap]]

    @staticmethod
    def average_score(reviews: Iterable[Review]) -> Optional[float]:
        """
        Mean score rounded to one decimal, None when there are no reviews.

        Examples:
            >>> ReviewAggregator.average_score([]) is None
            True
        """
        scores = [review.score.value for review in reviews]
        if not scores:
            return None
        return round(sum(scores) / len(scores), 1)
