"""
Tree Leaves Backend — Shared Schema Building Blocks
=====================================================

What:  Base model, timestamp helper and the error envelope used by every route.
How:   All API models serialize with camelCase keys (totalLeaves, requestId)
       through a pydantic alias generator; Python code keeps snake_case.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_timestamp() -> str:
    """
    Current UTC time as ISO 8601 with millisecond precision and a Z suffix.

    Example: 2024-01-15T12:00:00.000Z
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CamelModel(BaseModel):
    """Base for API models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel):
    """Every JSON response carries a success flag."""

    success: bool = Field(default=True, description="False only for error envelopes")


class ErrorResponse(ApiResponse):
    """
    What:  Standardized error envelope for all API errors.

    Example:
        {
            "success": false,
            "error": "validation_error",
            "message": "Invalid request body",
            "details": {"errors": [{"field": "index", "message": "..."}]},
            "requestId": "a1b2c3d4"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
