"""
API Dependencies

FastAPI dependency providers: the service container and the calling
principal.

Identity:
    Authentication is delegated to an upstream identity provider (gateway,
    auth proxy). It forwards the authenticated user id in the ``X-User-Id``
    header; the role is always resolved from the ``users`` collection, never
    taken from the request.
"""

import logging
from typing import Optional

from fastapi import Depends, Header
from fastapi.requests import HTTPConnection

from src.api.container import ReviewPipelineContainer
from src.domain.review.entities.user import User
from src.domain.shared.exceptions import NotFoundError

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"


class AuthenticationError(Exception):
    """
    Request carries no usable identity.

    Raised when the X-User-Id header is missing or names a user without a
    profile. Mapped to 401 Unauthorized.
    """

    def __init__(self, message: str, user_id: Optional[str] = None) -> None:
        self.message = message
        self.user_id = user_id
        super().__init__(message)


def get_container(connection: HTTPConnection) -> ReviewPipelineContainer:
    """Service container created in the app lifespan (HTTP and WebSocket)."""
    return connection.app.state.container


async def get_principal_id(
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
) -> str:
    """
    Authenticated user id from the identity header.

    Raises:
        AuthenticationError: Header missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError(f"Missing {USER_ID_HEADER} header")
    return x_user_id.strip()


async def resolve_user(container: ReviewPipelineContainer, user_id: str) -> User:
    """
    Load the profile of an authenticated principal.

    Raises:
        AuthenticationError: No profile exists for user_id
    """
    try:
        return await container.users.get_profile(user_id)
    except NotFoundError as e:
        logger.warning(f"Request from user {user_id} without profile")
        raise AuthenticationError(
            f"No profile for user {user_id}; create one with POST /api/users",
            user_id=user_id,
        ) from e


async def get_current_user(
    user_id: str = Depends(get_principal_id),
    container: ReviewPipelineContainer = Depends(get_container),
) -> User:
    """Profile (and therefore role) of the calling principal."""
    return await resolve_user(container, user_id)
