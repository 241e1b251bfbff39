"""
Shared Domain Module

Shared domain concepts used across the review pipeline.

This module exports:
    - DomainException: Base exception for all domain errors
    - The concrete failure types of the review-workflow engine
"""

from .exceptions import (
    DomainException,
    ForbiddenError,
    InvalidScoreError,
    InvalidTransitionError,
    NotFoundError,
    StoreUnavailableError,
    WriteConflictError,
)

__all__ = [
    "DomainException",
    "ForbiddenError",
    "InvalidScoreError",
    "InvalidTransitionError",
    "NotFoundError",
    "StoreUnavailableError",
    "WriteConflictError",
]
