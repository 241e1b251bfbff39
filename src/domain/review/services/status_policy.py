"""
Application Status Policy

The status graph of an application and the checks built on it. Pure domain
logic, no I/O: StatusStateMachine in the Application Layer validates with
these functions before it writes anything.

Graph:
    pending   -> in-review | accepted | rejected
    in-review -> accepted | rejected
    accepted  -> (terminal)
    rejected  -> (terminal)

Self-transitions are not edges, so re-applying the current status is an
InvalidTransitionError like any other missing edge.
"""

from types import MappingProxyType
from typing import Mapping

from src.domain.review.entities.application import ApplicationStatus
from src.domain.shared.exceptions import InvalidTransitionError

Transition = tuple[ApplicationStatus, ApplicationStatus]

TRANSITION_GRAPH: Mapping[ApplicationStatus, frozenset[ApplicationStatus]] = MappingProxyType(
    {
        ApplicationStatus.PENDING: frozenset(
            {
                ApplicationStatus.IN_REVIEW,
                ApplicationStatus.ACCEPTED,
                ApplicationStatus.REJECTED,
            }
        ),
        ApplicationStatus.IN_REVIEW: frozenset(
            {ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED}
        ),
        ApplicationStatus.ACCEPTED: frozenset(),
        ApplicationStatus.REJECTED: frozenset(),
    }
)

ALL_TRANSITIONS: frozenset[Transition] = frozenset(
    (source, target)
    for source, targets in TRANSITION_GRAPH.items()
    for target in targets
)


def allowed_targets(current: ApplicationStatus) -> frozenset[ApplicationStatus]:
    """Statuses reachable from ``current`` in one step."""
    return TRANSITION_GRAPH[current]


def is_valid_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    """
    Check a single edge of the status graph.

    Examples:
        >>> is_valid_transition(ApplicationStatus.PENDING, ApplicationStatus.ACCEPTED)
        True
        >>> is_valid_transition(ApplicationStatus.ACCEPTED, ApplicationStatus.PENDING)
        False
    """
    return target in TRANSITION_GRAPH[current]


def validate_transition(current: ApplicationStatus, target: ApplicationStatus) -> None:
    """
    Raise when ``current -> target`` is not an edge of the graph.

    Raises:
        InvalidTransitionError: With a message naming the reason (terminal
            state, no-op, or unreachable target)
    """
    if is_valid_transition(current, target):
        return

    if current.is_terminal:
        reason = f"status '{current.value}' is terminal"
    elif current == target:
        reason = f"application is already '{current.value}'"
    else:
        allowed = ", ".join(sorted(s.value for s in allowed_targets(current)))
        reason = f"allowed targets from '{current.value}' are: {allowed}"

    raise InvalidTransitionError(
        f"Cannot move application from '{current.value}' to '{target.value}': {reason}",
        current_status=current.value,
        target_status=target.value,
    )
