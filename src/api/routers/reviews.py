"""
API Router for Reviews

Responsibility:
    HTTP interface for submitting reviews and listing an application's
    reviews.

Contains:
    - POST /applications/{application_id}/reviews - Submit a review (reviewer)
    - GET /applications/{application_id}/reviews - Reviews newest first (reviewer, admin)

Architecture Notes:
    - Part of API Layer (Presentation)
    - Delegates to ReviewAggregator; the first review of a pending
      application also moves it to in-review
    - Score range is a domain rule (InvalidScoreError -> 400), so the request
      model only requires an integer
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from pydantic import BaseModel, Field

from src.api.container import ReviewPipelineContainer
from src.api.dependencies import get_container, get_current_user
from src.api.schemas.common import ErrorResponse
from src.api.schemas.resources import ReviewResponse
from src.domain.review.entities.user import User
from src.domain.review.services.role_access_guard import Action, ViewId

logger = logging.getLogger(__name__)


class SubmitReviewRequest(BaseModel):
    score: int = Field(description="Integer score from 1 to 10")
    comments: str = Field(default="", max_length=10_000)
    private_notes: str = Field(default="", max_length=10_000)


class SubmitReviewResponse(BaseModel):
    review_id: str


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    count: int
    average_score: Optional[float] = Field(
        default=None, description="Mean score rounded to one decimal, null without reviews"
    )


# ============================================================================
# ROUTER CONFIGURATION
# ============================================================================


router = APIRouter(
    prefix="/applications/{application_id}/reviews",
    tags=["reviews"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized - Missing or unknown user"},
        403: {"model": ErrorResponse, "description": "Forbidden - Role not allowed"},
        404: {"model": ErrorResponse, "description": "Not Found - Unknown application"},
        503: {"model": ErrorResponse, "description": "Service Unavailable - Store failure"},
    },
)


# ============================================================================
# ENDPOINTS
# ============================================================================


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SubmitReviewResponse,
    summary="Submit a review (reviewer)",
    responses={400: {"model": ErrorResponse, "description": "Bad Request - Score out of range"}},
)
async def submit_review(
    body: SubmitReviewRequest,
    application_id: str = Path(..., description="Reviewed application"),
    user: User = Depends(get_current_user),
    container: ReviewPipelineContainer = Depends(get_container),
) -> SubmitReviewResponse:
    container.guard.require_action(user.role, Action.SUBMIT_REVIEW)
    review_id = await container.reviews.submit(
        application_id=application_id,
        reviewer_id=user.id,
        reviewer_name=user.name,
        score=body.score,
        comments=body.comments,
        private_notes=body.private_notes,
    )
    return SubmitReviewResponse(review_id=review_id)


@router.get("", response_model=ReviewListResponse, summary="List reviews")
async def list_reviews(
    application_id: str = Path(..., description="Reviewed application"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    user: User = Depends(get_current_user),
    container: ReviewPipelineContainer = Depends(get_container),
) -> ReviewListResponse:
    container.guard.require_view(user.role, ViewId.REVIEWS)
    reviews = await container.reviews.list_for(application_id, limit)
    return ReviewListResponse(
        reviews=[ReviewResponse.from_entity(r) for r in reviews],
        count=len(reviews),
        average_score=container.reviews.average_score(reviews),
    )
