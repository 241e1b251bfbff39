"""
StatusStateMachine Application Service

Validates and applies application status transitions.

Responsibility:
    - Reject transitions by applicants (ForbiddenError)
    - Reject transitions that are not edges of the status graph (InvalidTransitionError)
    - Reject edges the acting role does not hold (ForbiddenError)
    - Issue exactly one store write per successful call

Architecture Notes:
    - Part of Application Layer (orchestrates domain policy + store write)
    - Graph lives in src.domain.review.services.status_policy
    - Permissions live in RoleAccessGuard
    - The passed-in Application is a read-only projection and is never mutated;
      the new status becomes visible through the next feed snapshot or read

Concurrency:
    The write is conditional on the stored status still being the status that
    was validated. A concurrent change between read and write therefore
    surfaces as InvalidTransitionError instead of silently overwriting a
    terminal disposition.
"""

import logging

from src.domain.review.entities.application import Application, ApplicationStatus
from src.domain.review.entities.user import UserRole
from src.domain.review.repositories.entity_store import Collection, EntityStoreProtocol
from src.domain.review.services.role_access_guard import RoleAccessGuard
from src.domain.review.services.status_policy import validate_transition
from src.domain.shared.exceptions import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    WriteConflictError,
)
from src.shared.utils.timestamps import to_iso, utc_now

logger = logging.getLogger(__name__)


class StatusStateMachine:
    """
    Apply status transitions to applications in the entity store.

    Examples:
        >>> machine = StatusStateMachine(store, RoleAccessGuard())
        >>> await machine.apply(application, ApplicationStatus.ACCEPTED, UserRole.ADMIN)
        <ApplicationStatus.ACCEPTED: 'accepted'>
    """

    def __init__(self, store: EntityStoreProtocol, guard: RoleAccessGuard) -> None:
        """
        Args:
            store: Entity store the status write goes to
            guard: Role permission table
        """
        self.store = store
        self.guard = guard

    async def apply(
        self,
        application: Application,
        target_status: ApplicationStatus,
        acting_role: UserRole,
    ) -> ApplicationStatus:
        """
        Validate and write one status transition.

        Process Flow:
            1. Applicants may not transition at all -> ForbiddenError
            2. current -> target must be a graph edge -> InvalidTransitionError
            3. Role must hold the edge -> ForbiddenError
            4. Conditional write {status, updated_at} (precondition: status unchanged)

        Args:
            application: Projection holding the status to transition from
            target_status: Requested status
            acting_role: Role of the principal requesting the change

        Returns:
            The new status, once the store has confirmed the write

        Raises:
            ForbiddenError: Applicant caller, or edge not permitted for the role
            InvalidTransitionError: Not an edge, or the stored status changed concurrently
            NotFoundError: Application vanished from the store
            StoreUnavailableError: Store I/O failure
        """
        acting_role = UserRole(acting_role)
        target_status = ApplicationStatus(target_status)
        current = application.status

        if acting_role == UserRole.APPLICANT:
            raise ForbiddenError(
                "Applicants cannot change application status",
                role=acting_role.value,
                action="transition",
            )

        validate_transition(current, target_status)

        if not self.guard.can_transition(acting_role, current, target_status):
            raise ForbiddenError(
                f"Role '{acting_role.value}' may not move applications "
                f"from '{current.value}' to '{target_status.value}'",
                role=acting_role.value,
                action="transition",
            )

        try:
            await self.store.update(
                Collection.APPLICATIONS,
                application.id,
                {"status": target_status.value, "updated_at": to_iso(utc_now())},
                precondition={"status": current.value},
            )
        except WriteConflictError as e:
            logger.warning(
                f"Status of application {application.id} changed concurrently; "
                f"transition {current.value} -> {target_status.value} not applied"
            )
            raise InvalidTransitionError(
                f"Application {application.id} is no longer '{current.value}'",
                current_status=current.value,
                target_status=target_status.value,
            ) from e

        logger.info(
            f"Application {application.id} status: {current.value} -> "
            f"{target_status.value} (by {acting_role.value})"
        )
        return target_status

    async def apply_by_id(
        self,
        application_id: str,
        target_status: ApplicationStatus,
        acting_role: UserRole,
    ) -> ApplicationStatus:
        """
        Read a fresh projection of the application, then apply().

        Raises:
            NotFoundError: If the application does not exist
            (plus everything apply() raises)
        """
        record = await self.store.get_by_id(Collection.APPLICATIONS, application_id)
        if record is None:
            raise NotFoundError(
                f"Application {application_id} not found",
                collection=Collection.APPLICATIONS.value,
                entity_id=application_id,
            )
        return await self.apply(Application.from_dict(record), target_status, acting_role)
