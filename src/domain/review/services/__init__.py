"""
Review Domain Services Module

Business operations that don't naturally fit into entities. All pure: no I/O.

This module exports:
    - Status policy: TRANSITION_GRAPH, validate_transition, is_valid_transition
    - RoleAccessGuard: Role -> views / transitions / actions lookup table
    - StatsCalculator: DashboardStats and RoleBreakdown from snapshots
"""

from .role_access_guard import (
    REVIEWABLE_STATUSES,
    ROLE_PERMISSIONS,
    Action,
    FeedFilter,
    RoleAccessGuard,
    RolePermissions,
    ViewId,
)
from .stats_calculator import StatsCalculator
from .status_policy import (
    ALL_TRANSITIONS,
    TRANSITION_GRAPH,
    Transition,
    allowed_targets,
    is_valid_transition,
    validate_transition,
)

__all__ = [
    "ALL_TRANSITIONS",
    "REVIEWABLE_STATUSES",
    "ROLE_PERMISSIONS",
    "TRANSITION_GRAPH",
    "Action",
    "FeedFilter",
    "RoleAccessGuard",
    "RolePermissions",
    "StatsCalculator",
    "Transition",
    "ViewId",
    "allowed_targets",
    "is_valid_transition",
    "validate_transition",
]
