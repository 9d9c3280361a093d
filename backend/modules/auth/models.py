"""
Authentication module data models.

Token claims, request bodies and results of the login, two-factor and
password flows.
"""

from datetime import datetime
from typing import Literal, Optional, Union
from pydantic import BaseModel, EmailStr, Field

from shared.models import PrincipalKind
from modules.principals.models import Principal


# -----------------------------------------------------------------------------
# Token claims
# -----------------------------------------------------------------------------


class SessionClaims(BaseModel):
    """Claims of a full session token. Accepted by the authorization gate."""

    sub: str = Field(..., description="Principal ID")
    kind: PrincipalKind
    role: str

    model_config = {"frozen": True}


class PendingClaims(BaseModel):
    """
    Claims of a 2FA-pending token.

    Only good for submitting or re-requesting a one-time code. It is signed
    for a different audience, so it never decodes as a session token.
    """

    sub: str = Field(..., description="Principal ID")
    kind: PrincipalKind

    model_config = {"frozen": True}


TokenClaims = Union[SessionClaims, PendingClaims]


class JWTPayload(BaseModel):
    """Decoded JWT body as written by TokenIssuer."""

    sub: str
    kind: PrincipalKind
    role: Optional[str] = None
    aud: str
    iss: str
    exp: int
    iat: int


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class TwoFactorVerifyRequest(BaseModel):
    code: str = Field(..., pattern=r"^\d{6}$", description="Six-digit code from the email")


class TwoFactorToggleRequest(BaseModel):
    enabled: bool


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    email: EmailStr
    code: str = Field(..., pattern=r"^\d{6}$")
    new_password: str = Field(..., min_length=6, max_length=128)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=6, max_length=128)


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------


class LoginResponse(BaseModel):
    """A granted session."""

    token: str
    token_type: str = "bearer"
    principal: Principal


class TwoFactorChallenge(BaseModel):
    """Login paused until the emailed code is submitted with the pending token."""

    status: Literal["2fa-required"] = "2fa-required"
    message: str = "2FA code sent to your email"
    token: str


class TwoFactorVerification(BaseModel):
    verified: bool


class TwoFactorCodeSent(BaseModel):
    email: str
    expires_at: datetime


class TwoFactorStatus(BaseModel):
    two_factor_enabled: bool


class PasswordResetAcknowledgement(BaseModel):
    """Same shape whether or not the email belongs to anyone."""

    sent: bool = True
    message: str = "If the email is registered, a reset code has been sent"


class MessageResponse(BaseModel):
    message: str
