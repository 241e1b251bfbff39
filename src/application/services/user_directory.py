"""
UserDirectoryService

User profiles in the ``users`` collection: creation after the identity
provider has authenticated a principal, lookup, listing and admin role
reassignment.
"""

import logging

from src.domain.review.entities.user import User, UserRole
from src.domain.review.repositories.entity_store import (
    NEWEST_FIRST,
    Collection,
    EntityStoreProtocol,
)
from src.domain.review.services.role_access_guard import Action, RoleAccessGuard, ViewId
from src.domain.shared.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class UserDirectoryService:
    """
    Read and manage user profiles.

    Role reassignment has no validity graph: an admin may move any user from
    any role to any role, including themselves.
    """

    def __init__(self, store: EntityStoreProtocol, guard: RoleAccessGuard) -> None:
        self.store = store
        self.guard = guard

    async def create_profile(
        self,
        user_id: str,
        email: str,
        name: str,
        role: UserRole = UserRole.APPLICANT,
    ) -> User:
        """
        Store the profile of a freshly authenticated principal.

        The document id is the identity-provider user id. Calling it again for
        the same id replaces email, name and role and keeps created_at.
        """
        await self.store.put(
            Collection.USERS,
            user_id,
            {"email": email, "name": name, "role": UserRole(role).value},
        )
        logger.info(f"User profile stored: {user_id} ({UserRole(role).value})")
        return await self.get_profile(user_id)

    async def register(self, user_id: str, email: str, name: str) -> User:
        """
        Self-service profile creation.

        New principals start as applicants; a returning principal keeps the
        role it already holds, so registering again cannot change a role.
        """
        record = await self.store.get_by_id(Collection.USERS, user_id)
        role = User.from_dict(record).role if record is not None else UserRole.APPLICANT
        return await self.create_profile(user_id, email, name, role)

    async def get_profile(self, user_id: str) -> User:
        """
        Raises:
            NotFoundError: No profile for user_id
        """
        record = await self.store.get_by_id(Collection.USERS, user_id)
        if record is None:
            raise NotFoundError(
                f"User {user_id} not found",
                collection=Collection.USERS.value,
                entity_id=user_id,
            )
        return User.from_dict(record)

    async def list_users(self, acting_role: UserRole) -> list[User]:
        """
        Every user, newest first.

        Raises:
            ForbiddenError: acting_role may not open the users view
        """
        self.guard.require_view(acting_role, ViewId.USERS)
        records = await self.store.query(Collection.USERS, (), NEWEST_FIRST)
        return [User.from_dict(r) for r in records]

    async def reassign_role(
        self, acting_role: UserRole, user_id: str, new_role: UserRole
    ) -> UserRole:
        """
        Change a user's role (one store write).

        Raises:
            ForbiddenError: acting_role is not admin
            NotFoundError: No profile for user_id
        """
        self.guard.require_action(acting_role, Action.REASSIGN_ROLE)
        new_role = UserRole(new_role)

        current = await self.get_profile(user_id)
        await self.store.update(Collection.USERS, user_id, {"role": new_role.value})
        logger.info(
            f"User {user_id} role changed: {current.role.value} -> {new_role.value}"
        )
        return new_role
