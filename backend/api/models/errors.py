"""
Error response models.

Standardized error responses for the API. Every failure, whatever its
origin, is rendered with the same three keys.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class FieldError(BaseModel):
    """One failed field from request validation."""

    loc: list[str]
    msg: str
    type: str


class ValidationErrorResponse(ErrorResponse):
    """Validation error response format."""

    error: str = "VALIDATION_ERROR"
    message: str = "Request validation failed"
