"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from enum import Enum
from pydantic import BaseModel, Field


class PrincipalKind(str, Enum):
    """The closed set of principal kinds. Each kind has its own table."""

    USER = "user"
    ADMIN = "admin"


class AuthenticatedPrincipal(BaseModel):
    """
    Represents the caller behind a verified session token.

    Resolved by the authorization gate from the token claims plus a store
    lookup, then made available to route handlers via dependency injection.
    Carries no credential material.
    """

    id: str = Field(..., description="Principal ID (UUID)")
    kind: PrincipalKind = Field(..., description="Principal kind")
    username: str = Field(..., description="Username")
    email: str = Field(..., description="Lowercased email address")
    role: str = Field(..., description="Role used by role gates")
    status: str = Field(default="active", description="Account status")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",
    }
