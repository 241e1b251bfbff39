"""
Common API Schemas

Shared Pydantic models used across all API routers.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standard error response model for all API errors.

    Attributes:
        code: Machine-readable error code (e.g., "INVALID_TRANSITION", "FORBIDDEN")
        message: Human-readable error message
        details: Exception type and its context (statuses, role, ids)
    """

    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        default=None, description="Additional error context"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "code": "INVALID_TRANSITION",
                "message": (
                    "InvalidTransitionError: Cannot move application from "
                    "'accepted' to 'in-review': 'accepted' is terminal"
                ),
                "details": {
                    "exception_type": "InvalidTransitionError",
                    "current_status": "accepted",
                    "target_status": "in-review",
                },
            }
        }
    }
