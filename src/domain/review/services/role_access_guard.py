"""
RoleAccessGuard Domain Service

Single lookup table mapping each role to the views it may open, the status
transitions it may perform and the other actions it may take. Every
permission decision in the pipeline goes through this table, so adding a role
or a permission is one edit to ROLE_PERMISSIONS.

Responsibility:
    - permitted_views / permitted_transitions / permitted_actions lookups
    - Raising ForbiddenError for denied views and actions
    - Deriving the application-visibility filter used by the realtime feed

Role table:
    applicant: own applications; submit applications, upload files; no transitions
    reviewer:  pending/in-review applications, reviews, stats; submit reviews;
               pending->in-review, *->accepted, *->rejected
    admin:     everything; every graph transition; reassign roles, export data

Role reassignment is an admin action without a validity graph: any role may be
changed to any role.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from src.domain.review.entities.application import Application, ApplicationStatus
from src.domain.review.entities.user import UserRole
from src.domain.review.repositories.entity_store import FieldFilter
from src.domain.review.services.status_policy import ALL_TRANSITIONS, Transition
from src.domain.shared.exceptions import ForbiddenError


class ViewId(str, Enum):
    """Identifiers of the data views a role may open."""

    OWN_APPLICATIONS = "own_applications"
    REVIEWABLE_APPLICATIONS = "reviewable_applications"
    ALL_APPLICATIONS = "all_applications"
    REVIEWS = "reviews"
    USERS = "users"
    STATS = "stats"


class Action(str, Enum):
    """Non-transition operations gated by role."""

    SUBMIT_APPLICATION = "submit_application"
    UPLOAD_FILES = "upload_files"
    SUBMIT_REVIEW = "submit_review"
    REASSIGN_ROLE = "reassign_role"
    EXPORT_DATA = "export_data"


REVIEWABLE_STATUSES: frozenset[ApplicationStatus] = frozenset(
    {ApplicationStatus.PENDING, ApplicationStatus.IN_REVIEW}
)


@dataclass(frozen=True)
class RolePermissions:
    """Everything one role is allowed to do."""

    views: frozenset[ViewId]
    transitions: frozenset[Transition]
    actions: frozenset[Action]


ROLE_PERMISSIONS: Mapping[UserRole, RolePermissions] = MappingProxyType(
    {
        UserRole.APPLICANT: RolePermissions(
            views=frozenset({ViewId.OWN_APPLICATIONS}),
            transitions=frozenset(),
            actions=frozenset({Action.SUBMIT_APPLICATION, Action.UPLOAD_FILES}),
        ),
        UserRole.REVIEWER: RolePermissions(
            views=frozenset(
                {ViewId.REVIEWABLE_APPLICATIONS, ViewId.REVIEWS, ViewId.STATS}
            ),
            transitions=frozenset(
                (source, target)
                for source, target in ALL_TRANSITIONS
                if target
                in (
                    ApplicationStatus.IN_REVIEW,
                    ApplicationStatus.ACCEPTED,
                    ApplicationStatus.REJECTED,
                )
            ),
            actions=frozenset({Action.SUBMIT_REVIEW}),
        ),
        UserRole.ADMIN: RolePermissions(
            views=frozenset(
                {
                    ViewId.ALL_APPLICATIONS,
                    ViewId.REVIEWS,
                    ViewId.USERS,
                    ViewId.STATS,
                }
            ),
            transitions=ALL_TRANSITIONS,
            actions=frozenset({Action.REASSIGN_ROLE, Action.EXPORT_DATA}),
        ),
    }
)


ApplicationPredicate = Callable[[Application], bool]


@dataclass(frozen=True)
class FeedFilter:
    """
    Visibility filter of one principal over the applications collection.

    Attributes:
        predicates: Store-side filters (pushed down to the query)
        client_filter: Extra predicate applied after delivery, None for no-op
    """

    predicates: tuple[FieldFilter, ...] = ()
    client_filter: Optional[ApplicationPredicate] = None

    def accepts(self, application: Application) -> bool:
        record = {"applicant_id": application.applicant_id, "status": application.status.value}
        if not all(p.matches(record) for p in self.predicates):
            return False
        return self.client_filter is None or self.client_filter(application)


def _is_reviewable(application: Application) -> bool:
    return application.status in REVIEWABLE_STATUSES


class RoleAccessGuard:
    """
    Stateless permission lookups over ROLE_PERMISSIONS.

    Examples:
        >>> guard = RoleAccessGuard()
        >>> guard.can_transition(UserRole.REVIEWER, ApplicationStatus.PENDING, ApplicationStatus.IN_REVIEW)
        True
        >>> guard.permitted_transitions(UserRole.APPLICANT)
        frozenset()
        >>> guard.require_action(UserRole.REVIEWER, Action.EXPORT_DATA)
        Traceback (most recent call last):
        ...
        ForbiddenError: ForbiddenError: Role 'reviewer' is not allowed to export_data
    """

    def __init__(self, permissions: Mapping[UserRole, RolePermissions] = ROLE_PERMISSIONS) -> None:
        self._permissions = permissions

    def _for(self, role: UserRole) -> RolePermissions:
        return self._permissions[UserRole(role)]

    def permitted_views(self, role: UserRole) -> frozenset[ViewId]:
        return self._for(role).views

    def permitted_transitions(self, role: UserRole) -> frozenset[Transition]:
        return self._for(role).transitions

    def permitted_actions(self, role: UserRole) -> frozenset[Action]:
        return self._for(role).actions

    def can_transition(
        self, role: UserRole, current: ApplicationStatus, target: ApplicationStatus
    ) -> bool:
        return (current, target) in self._for(role).transitions

    def require_view(self, role: UserRole, view: ViewId) -> None:
        if view not in self._for(role).views:
            raise ForbiddenError(
                f"Role '{UserRole(role).value}' may not open view {view.value}",
                role=UserRole(role).value,
                action=view.value,
            )

    def require_action(self, role: UserRole, action: Action) -> None:
        if action not in self._for(role).actions:
            raise ForbiddenError(
                f"Role '{UserRole(role).value}' is not allowed to {action.value}",
                role=UserRole(role).value,
                action=action.value,
            )

    def feed_filter(self, role: UserRole, user_id: str) -> FeedFilter:
        """
        Visibility filter for the applications a principal may see.

        applicant: server-side ``applicant_id == user_id``
        reviewer:  client-side ``status in {pending, in-review}``
        admin:     no filter
        """
        views = self.permitted_views(role)
        if ViewId.ALL_APPLICATIONS in views:
            return FeedFilter()
        if ViewId.REVIEWABLE_APPLICATIONS in views:
            return FeedFilter(client_filter=_is_reviewable)
        return FeedFilter(predicates=(FieldFilter.eq("applicant_id", user_id),))

    def can_view_application(
        self, role: UserRole, user_id: str, application: Application
    ) -> bool:
        return self.feed_filter(role, user_id).accepts(application)
