"""
Auth API endpoints.

Login, two-factor, password reset and the caller's own profile. The same
routes are mounted once per principal kind; build_auth_router binds the kind.
"""

from typing import Union

from fastapi import APIRouter, Depends

from api.dependencies import get_auth_service, get_principal_service
from api.middleware.auth import PendingFor, SessionFor
from shared.models import AuthenticatedPrincipal, PrincipalKind
from modules.principals.interfaces import IPrincipalService
from modules.principals.models import Principal

from .interfaces import IAuthService
from .models import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordResetAcknowledgement,
    PasswordResetConfirm,
    PasswordResetRequest,
    PendingClaims,
    TwoFactorChallenge,
    TwoFactorCodeSent,
    TwoFactorStatus,
    TwoFactorToggleRequest,
    TwoFactorVerifyRequest,
)


def build_auth_router(kind: PrincipalKind) -> APIRouter:
    router = APIRouter()
    pending = PendingFor(kind)
    current = SessionFor(kind)

    @router.post("/auth/login", response_model=Union[LoginResponse, TwoFactorChallenge])
    async def login(
        request: LoginRequest,
        service: IAuthService = Depends(get_auth_service),
    ) -> Union[LoginResponse, TwoFactorChallenge]:
        """
        Exchange email and password for a session token.

        With 2FA enabled, a code is emailed instead and a short-lived pending
        token is returned for /auth/2fa/verify.
        """
        return await service.login(kind, request.email, request.password)

    @router.post("/auth/2fa/verify", response_model=LoginResponse)
    async def verify_two_factor(
        request: TwoFactorVerifyRequest,
        claims: PendingClaims = Depends(pending),
        service: IAuthService = Depends(get_auth_service),
    ) -> LoginResponse:
        """Submit the emailed code with the pending token to get a session."""
        await service.verify_two_factor(kind, claims.sub, request.code)
        return await service.open_session(kind, claims.sub)

    @router.post("/auth/2fa/resend", response_model=TwoFactorCodeSent)
    async def resend_two_factor_code(
        claims: PendingClaims = Depends(pending),
        service: IAuthService = Depends(get_auth_service),
    ) -> TwoFactorCodeSent:
        return await service.send_two_factor_code(kind, claims.sub)

    @router.post("/auth/password/forgot", response_model=PasswordResetAcknowledgement)
    async def forgot_password(
        request: PasswordResetRequest,
        service: IAuthService = Depends(get_auth_service),
    ) -> PasswordResetAcknowledgement:
        """Email a reset code. The response never reveals whether the email exists."""
        return await service.request_password_reset(kind, request.email)

    @router.post("/auth/password/reset", response_model=MessageResponse)
    async def reset_password(
        request: PasswordResetConfirm,
        service: IAuthService = Depends(get_auth_service),
    ) -> MessageResponse:
        return await service.reset_password(kind, request.email, request.code, request.new_password)

    @router.get("/me", response_model=Principal)
    async def get_me(
        principal: AuthenticatedPrincipal = Depends(current),
        service: IPrincipalService = Depends(get_principal_service),
    ) -> Principal:
        return await service.get(kind, principal.id)

    @router.put("/me/2fa", response_model=TwoFactorStatus)
    async def toggle_two_factor(
        request: TwoFactorToggleRequest,
        principal: AuthenticatedPrincipal = Depends(current),
        service: IAuthService = Depends(get_auth_service),
    ) -> TwoFactorStatus:
        return await service.set_two_factor(kind, principal.id, request.enabled)

    return router
