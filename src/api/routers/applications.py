"""
API Router for Applications

Responsibility:
    HTTP interface for submitting applications, reading them through the
    caller's role filter, applying status transitions and streaming the live
    feed over a WebSocket.

Contains:
    - POST /applications - Submit an application (applicant)
    - GET /applications - Role-filtered list, optional ?status=
    - GET /applications/{application_id} - One visible application
    - POST /applications/{application_id}/status - Apply a status transition
    - WS /applications/stream?user_id= - Live role-filtered snapshots

Architecture Notes:
    - Part of API Layer (Presentation)
    - Domain exceptions propagate to the global handlers in main.py
    - The WebSocket owns one FeedSubscription and cancels it on disconnect
"""

import asyncio
import logging
from typing import Optional

from fastapi import (
    APIRouter,
    Depends,
    Path,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from pydantic import BaseModel, Field, model_validator

from src.api.container import ReviewPipelineContainer
from src.api.dependencies import (
    USER_ID_HEADER,
    AuthenticationError,
    get_container,
    get_current_user,
    resolve_user,
)
from src.api.schemas.common import ErrorResponse
from src.api.schemas.resources import (
    ApplicationResponse,
    FeedErrorMessage,
    FeedSnapshotMessage,
    PersonalInfoSchema,
    ProjectDetailsSchema,
)
from src.application.services.realtime_feed import FeedSnapshot
from src.domain.review.entities.application import ApplicationStatus
from src.domain.review.entities.user import User
from src.domain.shared.exceptions import DomainException

logger = logging.getLogger(__name__)


class SubmitApplicationRequest(BaseModel):
    """New application. Status is always pending and cannot be supplied."""

    personal_info: PersonalInfoSchema = Field(default_factory=PersonalInfoSchema)
    project_details: ProjectDetailsSchema
    file_urls: list[str] = Field(
        default_factory=list, description="URLs returned by POST /api/files"
    )

    @model_validator(mode="after")
    def validate_title(self) -> "SubmitApplicationRequest":
        if not self.project_details.title.strip():
            raise ValueError("project_details.title must not be empty")
        return self


class SubmitApplicationResponse(BaseModel):
    application_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING


class StatusChangeRequest(BaseModel):
    status: ApplicationStatus = Field(description="Target status")


class StatusChangeResponse(BaseModel):
    application_id: str
    status: ApplicationStatus


# ============================================================================
# ROUTER CONFIGURATION
# ============================================================================


router = APIRouter(
    prefix="/applications",
    tags=["applications"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized - Missing or unknown user"},
        403: {"model": ErrorResponse, "description": "Forbidden - Role not allowed"},
        503: {"model": ErrorResponse, "description": "Service Unavailable - Store failure"},
    },
)


# ============================================================================
# ENDPOINTS
# ============================================================================


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SubmitApplicationResponse,
    summary="Submit an application (applicant)",
)
async def submit_application(
    body: SubmitApplicationRequest,
    user: User = Depends(get_current_user),
    container: ReviewPipelineContainer = Depends(get_container),
) -> SubmitApplicationResponse:
    application_id = await container.submissions.submit(
        applicant_id=user.id,
        personal_info=body.personal_info.to_value_object(),
        project_details=body.project_details.to_value_object(),
        file_urls=body.file_urls,
    )
    return SubmitApplicationResponse(application_id=application_id)


@router.get(
    "",
    response_model=list[ApplicationResponse],
    summary="List applications visible to the caller",
    description=(
        "Applicants see their own applications, reviewers see pending and "
        "in-review ones, admins see all. Newest first."
    ),
)
async def list_applications(
    status_filter: Optional[ApplicationStatus] = Query(
        default=None, alias="status", description="Only applications in this status"
    ),
    user: User = Depends(get_current_user),
    container: ReviewPipelineContainer = Depends(get_container),
) -> list[ApplicationResponse]:
    applications = await container.queries.list_visible(user, status_filter)
    return [ApplicationResponse.from_entity(a) for a in applications]


@router.websocket("/stream")
async def stream_applications(
    websocket: WebSocket,
    user_id: Optional[str] = Query(default=None),
    container: ReviewPipelineContainer = Depends(get_container),
) -> None:
    """
    Push the caller's feed as JSON messages.

    Identity comes from ?user_id= (browsers cannot set headers on WebSocket
    handshakes) or the X-User-Id header. Every message is a complete
    FeedSnapshotMessage; clients replace their view with it. A store failure
    sends one FeedErrorMessage and closes with 1011.
    """
    principal_id = user_id or websocket.headers.get(USER_ID_HEADER)
    try:
        if not principal_id:
            raise AuthenticationError("Missing user_id")
        user = await resolve_user(container, principal_id)
    except AuthenticationError as e:
        logger.warning(f"WebSocket feed rejected: {e.message}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
        return

    await websocket.accept()
    subscription = container.feed.subscribe_for(user)

    async def watch_disconnect() -> None:
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info(f"WebSocket feed closed by client {user.id}")
        finally:
            subscription.cancel()

    watcher = asyncio.create_task(watch_disconnect())
    try:
        async for snapshot in subscription.stream():
            await websocket.send_text(_snapshot_message(snapshot).model_dump_json())

    except DomainException as e:
        logger.error(f"WebSocket feed for {user.id} failed: {e}")
        error = FeedErrorMessage(
            code=e.__class__.__name__.replace("Error", "").upper(), message=str(e)
        )
        await websocket.send_text(error.model_dump_json())
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)

    except WebSocketDisconnect:
        logger.info(f"WebSocket feed for {user.id} disconnected")

    finally:
        subscription.cancel()
        watcher.cancel()


def _snapshot_message(snapshot: FeedSnapshot) -> FeedSnapshotMessage:
    return FeedSnapshotMessage(
        sequence=snapshot.sequence,
        applications=[ApplicationResponse.from_entity(a) for a in snapshot.applications],
        stats=snapshot.stats,
    )


@router.get(
    "/{application_id}",
    response_model=ApplicationResponse,
    summary="Get one application",
    responses={404: {"model": ErrorResponse, "description": "Not Found - Unknown or not visible"}},
)
async def get_application(
    application_id: str = Path(..., description="Application id"),
    user: User = Depends(get_current_user),
    container: ReviewPipelineContainer = Depends(get_container),
) -> ApplicationResponse:
    application = await container.queries.get_visible(user, application_id)
    return ApplicationResponse.from_entity(application)


@router.post(
    "/{application_id}/status",
    response_model=StatusChangeResponse,
    summary="Apply a status transition",
    responses={
        404: {"model": ErrorResponse, "description": "Not Found - Unknown application"},
        409: {"model": ErrorResponse, "description": "Conflict - Not a valid transition"},
    },
)
async def change_status(
    body: StatusChangeRequest,
    application_id: str = Path(..., description="Application id"),
    user: User = Depends(get_current_user),
    container: ReviewPipelineContainer = Depends(get_container),
) -> StatusChangeResponse:
    """
    Move an application along the status graph.

    Reviewers may move pending/in-review applications to in-review, accepted
    or rejected; admins may apply any valid edge; applicants may not change
    status at all.
    """
    new_status = await container.state_machine.apply_by_id(
        application_id, body.status, user.role
    )
    return StatusChangeResponse(application_id=application_id, status=new_status)
