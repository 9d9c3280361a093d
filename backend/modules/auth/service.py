"""
Authentication service implementation.

Orchestrates login, two-factor challenges, password reset and password
change over an IPrincipalStore. Hashing runs in a worker thread; codes are
stored only as fingerprints.
"""

import asyncio
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from shared.models import PrincipalKind
from modules.notifications.exceptions import NotificationFailedError
from modules.notifications.interfaces import INotifier
from modules.principals.exceptions import PrincipalNotFoundError
from modules.principals.interfaces import IPrincipalStore
from modules.principals.models import PrincipalRecord, PrincipalStatus
from modules.principals.policy import validate_principal_id

from . import otp
from .hashing import PasswordHasher
from .interfaces import IAuthService
from .models import (
    LoginResponse,
    MessageResponse,
    PasswordResetAcknowledgement,
    TwoFactorChallenge,
    TwoFactorCodeSent,
    TwoFactorStatus,
    TwoFactorVerification,
)
from .tokens import TokenIssuer
from .exceptions import (
    AccountNotActiveError,
    CodeAlreadyUsedError,
    CodeExpiredError,
    CodeNotRequestedError,
    IncorrectPasswordError,
    InvalidCodeError,
    InvalidCredentialsError,
    InvalidResetRequestError,
    TwoFactorNotEnabledError,
)

logger = logging.getLogger(__name__)

RESET_PURPOSE = "Reset"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    """Treat naive timestamps from storage as UTC."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    Login state machine:
        Unauthenticated -> CredentialsChecked -> SessionIssued
                                              -> TwoFactorPending -> SessionIssued
    """

    def __init__(
        self,
        store: IPrincipalStore,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        notifier: INotifier,
        otp_ttl: timedelta = timedelta(minutes=10),
        login_history_limit: int = 20,
    ):
        self._store = store
        self._hasher = hasher
        self._tokens = tokens
        self._notifier = notifier
        self._otp_ttl = otp_ttl
        self._login_history_limit = login_history_limit
        self._decoy_hash: Optional[str] = None

    # -------------------------------------------------------------------------
    # Login
    # -------------------------------------------------------------------------

    async def login(
        self,
        kind: PrincipalKind,
        email: str,
        password: str,
    ) -> Union[LoginResponse, TwoFactorChallenge]:
        record = await self._store.find_by_email(kind, email)

        if record is None:
            # Spend the same hashing time as a real check
            await self._check_password(password, await self._get_decoy_hash())
            logger.warning("Failed %s login", kind.value)
            raise InvalidCredentialsError()

        if not await self._check_password(password, record.password_hash):
            logger.warning("Failed %s login", kind.value)
            raise InvalidCredentialsError()

        if record.status != PrincipalStatus.ACTIVE:
            raise AccountNotActiveError(record.status.value)

        if record.two_factor_enabled:
            await self._issue_two_factor_code(record)
            logger.info("2FA challenge issued for %s %s", kind.value, record.id)
            return TwoFactorChallenge(token=self._tokens.issue_pending(record))

        return await self._start_session(record)

    async def open_session(self, kind: PrincipalKind, principal_id: str) -> LoginResponse:
        record = await self._require(kind, principal_id)
        if record.status != PrincipalStatus.ACTIVE:
            raise AccountNotActiveError(record.status.value)
        return await self._start_session(record)

    async def _start_session(self, record: PrincipalRecord) -> LoginResponse:
        token = self._tokens.issue_session(record)

        now = _now()
        record.last_login = now
        record.login_history = [*record.login_history, now][-self._login_history_limit :]
        saved = await self._store.save(record)

        logger.info("Session opened for %s %s", saved.kind.value, saved.id)
        return LoginResponse(token=token, principal=saved.to_public())

    # -------------------------------------------------------------------------
    # Two-factor
    # -------------------------------------------------------------------------

    async def verify_two_factor(
        self,
        kind: PrincipalKind,
        principal_id: str,
        code: str,
    ) -> TwoFactorVerification:
        record = await self._require(kind, principal_id)

        if not record.two_factor_enabled:
            raise TwoFactorNotEnabledError()
        if record.two_factor_code_used:
            raise CodeAlreadyUsedError()
        if not record.two_factor_code_fingerprint or not record.two_factor_code_expires_at:
            raise CodeNotRequestedError()
        if _now() > _aware(record.two_factor_code_expires_at):
            raise CodeExpiredError()
        if not otp.matches(code, record.two_factor_code_fingerprint):
            raise InvalidCodeError()

        record.two_factor_code_used = True
        await self._store.save(record)
        return TwoFactorVerification(verified=True)

    async def send_two_factor_code(self, kind: PrincipalKind, principal_id: str) -> TwoFactorCodeSent:
        record = await self._require(kind, principal_id)
        if not record.two_factor_enabled:
            raise TwoFactorNotEnabledError()

        expires_at = await self._issue_two_factor_code(record)
        return TwoFactorCodeSent(email=record.email, expires_at=expires_at)

    async def set_two_factor(self, kind: PrincipalKind, principal_id: str, enabled: bool) -> TwoFactorStatus:
        record = await self._require(kind, principal_id)
        record.two_factor_enabled = bool(enabled)

        if not enabled:
            record.two_factor_code_fingerprint = None
            record.two_factor_code_expires_at = None
            record.two_factor_code_used = False

        saved = await self._store.save(record)
        logger.info("2FA %s for %s %s", "enabled" if enabled else "disabled", kind.value, saved.id)
        return TwoFactorStatus(two_factor_enabled=saved.two_factor_enabled)

    async def _issue_two_factor_code(self, record: PrincipalRecord) -> datetime:
        code = otp.generate_code()
        expires_at = _now() + self._otp_ttl

        record.two_factor_code_fingerprint = otp.fingerprint(code)
        record.two_factor_code_expires_at = expires_at
        record.two_factor_code_used = False
        await self._store.save(record)

        await self._notifier.send_two_factor_code(record.email, code)
        return expires_at

    # -------------------------------------------------------------------------
    # Password reset and change
    # -------------------------------------------------------------------------

    async def request_password_reset(self, kind: PrincipalKind, email: str) -> PasswordResetAcknowledgement:
        """
        Issue a reset code. Known and unknown emails get the same
        acknowledgement, including when the code could not be delivered.
        """
        record = await self._store.find_by_email(kind, email)
        if record is None:
            return PasswordResetAcknowledgement()

        code = otp.generate_code()
        record.reset_code_fingerprint = otp.fingerprint(code)
        record.reset_code_expires_at = _now() + self._otp_ttl
        await self._store.save(record)

        try:
            await self._notifier.send_password_reset_code(record.email, code)
        except NotificationFailedError:
            logger.error("Password reset code for %s %s could not be delivered", kind.value, record.id)
            return PasswordResetAcknowledgement()

        logger.info("Password reset code issued for %s %s", kind.value, record.id)
        return PasswordResetAcknowledgement()

    async def reset_password(
        self,
        kind: PrincipalKind,
        email: str,
        code: str,
        new_password: str,
    ) -> MessageResponse:
        record = await self._store.find_by_email(kind, email)
        if record is None:
            raise InvalidResetRequestError()

        if not record.reset_code_fingerprint or not record.reset_code_expires_at:
            raise CodeNotRequestedError(RESET_PURPOSE)
        if _now() > _aware(record.reset_code_expires_at):
            raise CodeExpiredError(RESET_PURPOSE)
        if not otp.matches(code, record.reset_code_fingerprint):
            raise InvalidCodeError(RESET_PURPOSE)

        record.password_hash = await asyncio.to_thread(self._hasher.hash, new_password)
        record.reset_code_fingerprint = None
        record.reset_code_expires_at = None
        await self._store.save(record)

        logger.info("Password reset completed for %s %s", kind.value, record.id)
        return MessageResponse(message="Password has been reset")

    async def change_password(
        self,
        kind: PrincipalKind,
        principal_id: str,
        current_password: str,
        new_password: str,
    ) -> MessageResponse:
        record = await self._require(kind, principal_id)

        if not await self._check_password(current_password, record.password_hash):
            raise IncorrectPasswordError()

        record.password_hash = await asyncio.to_thread(self._hasher.hash, new_password)
        await self._store.save(record)

        logger.info("Password changed for %s %s", kind.value, record.id)
        return MessageResponse(message="Password updated successfully")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _require(self, kind: PrincipalKind, principal_id: str) -> PrincipalRecord:
        principal_id = validate_principal_id(kind, principal_id)
        record = await self._store.find_by_id(kind, principal_id)
        if record is None:
            raise PrincipalNotFoundError(kind.value, principal_id)
        return record

    async def _check_password(self, password: str, digest: str) -> bool:
        return await asyncio.to_thread(self._hasher.verify, password, digest)

    async def _get_decoy_hash(self) -> str:
        if self._decoy_hash is None:
            self._decoy_hash = await asyncio.to_thread(self._hasher.hash, secrets.token_urlsafe(16))
        return self._decoy_hash
