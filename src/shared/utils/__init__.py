"""
Shared Utilities

Responsibility:
    Generic utility functions used across the application.

Contains:
    - timestamps: UTC clock and ISO-8601 conversion helpers

Does NOT contain:
    - Domain-specific utilities (use Domain layer)
    - Infrastructure utilities (use Infrastructure layer)
"""

from .timestamps import parse_timestamp, to_iso, utc_now

__all__ = ["parse_timestamp", "to_iso", "utc_now"]
