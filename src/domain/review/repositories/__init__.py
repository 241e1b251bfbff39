"""
Review Repository Interfaces Module

Repository pattern interfaces (contracts) for data persistence.
Defined in Domain Layer, implemented in Infrastructure Layer.

This module exports:
    - EntityStoreProtocol: Document store contract (CRUD, query, live subscribe)
    - Collection, FieldFilter, FilterOp, OrderBy: Query vocabulary
"""

from .entity_store import (
    NEWEST_FIRST,
    Collection,
    EntityStoreProtocol,
    ErrorCallback,
    FieldFilter,
    FilterOp,
    OrderBy,
    SnapshotCallback,
    Unsubscribe,
    matches_all,
)

__all__ = [
    "NEWEST_FIRST",
    "Collection",
    "EntityStoreProtocol",
    "ErrorCallback",
    "FieldFilter",
    "FilterOp",
    "OrderBy",
    "SnapshotCallback",
    "Unsubscribe",
    "matches_all",
]
