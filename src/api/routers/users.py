"""
API Router for User Profiles

Responsibility:
    HTTP interface for profile creation, lookup, listing and admin role
    reassignment.

Contains:
    - POST /users - Create the caller's profile (role applicant)
    - GET /users/me - Caller's profile
    - GET /users - Every user (admin)
    - PATCH /users/{user_id}/role - Reassign a role (admin)

Architecture Notes:
    - Part of API Layer (Presentation)
    - Delegates to UserDirectoryService
    - Self-registration always yields role applicant; only admins promote
"""

import logging

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, Field

from src.api.container import ReviewPipelineContainer
from src.api.dependencies import (
    get_container,
    get_current_user,
    get_principal_id,
)
from src.api.schemas.common import ErrorResponse
from src.api.schemas.resources import UserResponse
from src.domain.review.entities.user import User, UserRole

logger = logging.getLogger(__name__)


class CreateProfileRequest(BaseModel):
    """Profile data of a freshly authenticated principal."""

    email: str = Field(min_length=3, max_length=320, description="Account email")
    name: str = Field(min_length=1, max_length=200, description="Display name")


class ReassignRoleRequest(BaseModel):
    role: UserRole = Field(description="New role of the user")


class RoleChangeResponse(BaseModel):
    user_id: str
    role: UserRole


# ============================================================================
# ROUTER CONFIGURATION
# ============================================================================


router = APIRouter(
    prefix="/users",
    tags=["users"],
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
    response_model=UserResponse,
    summary="Create own profile",
)
async def create_profile(
    body: CreateProfileRequest,
    user_id: str = Depends(get_principal_id),
    container: ReviewPipelineContainer = Depends(get_container),
) -> UserResponse:
    """
    Store the caller's profile under the X-User-Id identity.

    Existing profiles keep their role; new profiles start as applicant.
    """
    user = await container.users.register(user_id, body.email, body.name)
    return UserResponse.from_entity(user)


@router.get("/me", response_model=UserResponse, summary="Current profile")
async def get_me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.from_entity(user)


@router.get("", response_model=list[UserResponse], summary="List users (admin)")
async def list_users(
    user: User = Depends(get_current_user),
    container: ReviewPipelineContainer = Depends(get_container),
) -> list[UserResponse]:
    users = await container.users.list_users(user.role)
    return [UserResponse.from_entity(u) for u in users]


@router.patch(
    "/{user_id}/role",
    response_model=RoleChangeResponse,
    summary="Reassign a user's role (admin)",
    responses={404: {"model": ErrorResponse, "description": "Not Found - Unknown user"}},
)
async def reassign_role(
    body: ReassignRoleRequest,
    user_id: str = Path(..., description="User whose role changes"),
    user: User = Depends(get_current_user),
    container: ReviewPipelineContainer = Depends(get_container),
) -> RoleChangeResponse:
    new_role = await container.users.reassign_role(user.role, user_id, body.role)
    logger.info(f"Admin {user.id} set role of {user_id} to {new_role.value}")
    return RoleChangeResponse(user_id=user_id, role=new_role)
