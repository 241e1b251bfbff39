"""
API Router for Dashboard Stats and Data Export

Contains:
    - GET /stats - DashboardStats over the caller's visible applications,
      plus users per role for admins
    - GET /export - Full JSON export as a file download (admin)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel

from src.api.container import ReviewPipelineContainer
from src.api.dependencies import get_container, get_current_user
from src.api.schemas.common import ErrorResponse
from src.domain.review.entities.user import User
from src.domain.review.services.role_access_guard import ViewId
from src.domain.review.value_objects.dashboard_stats import DashboardStats, RoleBreakdown

logger = logging.getLogger(__name__)


class StatsResponse(BaseModel):
    stats: DashboardStats
    roles: Optional[RoleBreakdown] = None


router = APIRouter(
    tags=["dashboard"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized - Missing or unknown user"},
        403: {"model": ErrorResponse, "description": "Forbidden - Role not allowed"},
        503: {"model": ErrorResponse, "description": "Service Unavailable - Store failure"},
    },
)


@router.get("/stats", response_model=StatsResponse, summary="Dashboard stats")
async def get_stats(
    user: User = Depends(get_current_user),
    container: ReviewPipelineContainer = Depends(get_container),
) -> StatsResponse:
    stats = await container.queries.dashboard_stats(user)
    roles = None
    if ViewId.USERS in container.guard.permitted_views(user.role):
        roles = await container.queries.role_breakdown(user)
    return StatsResponse(stats=stats, roles=roles)


@router.get(
    "/export",
    summary="Download full data export (admin)",
    response_class=Response,
    responses={200: {"content": {"application/json": {}}, "description": "Export file"}},
)
async def export_data(
    user: User = Depends(get_current_user),
    container: ReviewPipelineContainer = Depends(get_container),
) -> Response:
    document = await container.exports.build_export(user.role)
    filename = container.exports.filename()
    logger.info(f"Export {filename} downloaded by {user.id}")
    return Response(
        content=document.to_json(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
