"""Standardized error response schema."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body for every handled exception, 4xx and 5xx alike."""

    detail: str = Field(..., description="Human-readable error message, safe to show to users")
    code: str = Field(..., description="Machine-readable error code, e.g. INVALID_TOKEN")
