from datetime import datetime, timedelta, timezone

import pytest

from shared.models import PrincipalKind
from modules.auth.exceptions import (
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
from modules.auth.models import LoginResponse, PasswordResetAcknowledgement, TwoFactorChallenge
from modules.auth.otp import fingerprint
from modules.auth.service import AuthService
from modules.notifications.exceptions import NotificationFailedError
from modules.principals.exceptions import InvalidPrincipalIdError, PrincipalNotFoundError
from modules.principals.models import PrincipalStatus

PASSWORD = "correct-horse-1"
USER = PrincipalKind.USER
ADMIN = PrincipalKind.ADMIN


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_returns_session(self, auth_service, create_principal, tokens):
        """Valid credentials without 2FA should grant a session token."""
        created = await create_principal(USER)

        result = await auth_service.login(USER, "alice@example.com", PASSWORD)

        assert isinstance(result, LoginResponse)
        assert result.principal.id == created.id
        claims = tokens.verify_session(result.token)
        assert claims.sub == created.id
        assert claims.kind == USER
        assert claims.role == "user"

    @pytest.mark.asyncio
    async def test_login_email_is_case_insensitive(self, auth_service, create_principal):
        await create_principal(USER)
        result = await auth_service.login(USER, "  ALICE@Example.com ", PASSWORD)
        assert isinstance(result, LoginResponse)

    @pytest.mark.asyncio
    async def test_response_has_no_secrets(self, auth_service, create_principal):
        await create_principal(USER)
        result = await auth_service.login(USER, "alice@example.com", PASSWORD)
        dumped = result.model_dump()
        assert "password_hash" not in dumped["principal"]
        assert "two_factor_code_fingerprint" not in dumped["principal"]

    @pytest.mark.asyncio
    async def test_records_login_history(self, auth_service, create_principal, store):
        created = await create_principal(USER)

        await auth_service.login(USER, "alice@example.com", PASSWORD)
        await auth_service.login(USER, "alice@example.com", PASSWORD)

        record = await store.find_by_id(USER, created.id)
        assert record.last_login is not None
        assert len(record.login_history) == 2
        assert record.login_history[-1] == record.last_login

    @pytest.mark.asyncio
    async def test_login_history_is_capped(self, store, hasher, tokens, notifier, create_principal):
        service = AuthService(store, hasher, tokens, notifier, login_history_limit=3)
        created = await create_principal(USER)
        for _ in range(5):
            await service.login(USER, "alice@example.com", PASSWORD)

        record = await store.find_by_id(USER, created.id)
        assert len(record.login_history) == 3

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_look_the_same(self, auth_service, create_principal):
        """Both failures must be indistinguishable to the caller."""
        await create_principal(USER)

        with pytest.raises(InvalidCredentialsError) as unknown:
            await auth_service.login(USER, "nobody@example.com", PASSWORD)
        with pytest.raises(InvalidCredentialsError) as wrong:
            await auth_service.login(USER, "alice@example.com", "wrong-password")

        assert unknown.value.to_dict() == wrong.value.to_dict()

    @pytest.mark.asyncio
    async def test_kinds_are_separate(self, auth_service, create_principal):
        """A user cannot log in through the admin flow."""
        await create_principal(USER)
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(ADMIN, "alice@example.com", PASSWORD)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [PrincipalStatus.INACTIVE, PrincipalStatus.SUSPENDED])
    async def test_inactive_principal_cannot_log_in(self, auth_service, create_principal, status):
        await create_principal(ADMIN, username="root", email="root@example.com", status=status)
        with pytest.raises(AccountNotActiveError) as exc_info:
            await auth_service.login(ADMIN, "root@example.com", PASSWORD)
        assert exc_info.value.details["status"] == status.value

    @pytest.mark.asyncio
    async def test_inactive_with_wrong_password_is_invalid_credentials(self, auth_service, create_principal):
        await create_principal(USER, status=PrincipalStatus.SUSPENDED)
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(USER, "alice@example.com", "wrong-password")


class TestTwoFactor:
    @pytest.fixture
    def enrolled(self, create_principal):
        async def _enrolled(kind=USER):
            return await create_principal(kind, two_factor_enabled=True)

        return _enrolled

    @pytest.mark.asyncio
    async def test_login_with_2fa_returns_challenge(self, auth_service, enrolled, notifier, tokens, store):
        principal = await enrolled()

        result = await auth_service.login(USER, "alice@example.com", PASSWORD)

        assert isinstance(result, TwoFactorChallenge)
        assert result.status == "2fa-required"
        assert tokens.verify_pending(result.token).sub == principal.id

        purpose, destination, code = notifier.sent[-1]
        assert (purpose, destination) == ("2fa", "alice@example.com")
        record = await store.find_by_id(USER, principal.id)
        assert record.two_factor_code_fingerprint == fingerprint(code)
        assert record.two_factor_code_fingerprint != code
        assert record.two_factor_code_used is False
        assert record.last_login is None

    @pytest.mark.asyncio
    async def test_verify_then_open_session(self, auth_service, enrolled, notifier, store):
        principal = await enrolled()
        await auth_service.login(USER, "alice@example.com", PASSWORD)

        verification = await auth_service.verify_two_factor(USER, principal.id, notifier.last_code())
        session = await auth_service.open_session(USER, principal.id)

        assert verification.verified is True
        assert session.principal.id == principal.id
        record = await store.find_by_id(USER, principal.id)
        assert record.two_factor_code_used is True
        assert record.last_login is not None

    @pytest.mark.asyncio
    async def test_code_is_single_use(self, auth_service, enrolled, notifier):
        principal = await enrolled()
        await auth_service.login(USER, "alice@example.com", PASSWORD)
        code = notifier.last_code()

        await auth_service.verify_two_factor(USER, principal.id, code)
        with pytest.raises(CodeAlreadyUsedError):
            await auth_service.verify_two_factor(USER, principal.id, code)

    @pytest.mark.asyncio
    async def test_wrong_code(self, auth_service, enrolled, notifier):
        principal = await enrolled()
        await auth_service.login(USER, "alice@example.com", PASSWORD)
        wrong = "000000" if notifier.last_code() != "000000" else "111111"

        with pytest.raises(InvalidCodeError):
            await auth_service.verify_two_factor(USER, principal.id, wrong)

    @pytest.mark.asyncio
    async def test_expired_code(self, auth_service, enrolled, notifier, store):
        principal = await enrolled()
        await auth_service.login(USER, "alice@example.com", PASSWORD)

        record = await store.find_by_id(USER, principal.id)
        record.two_factor_code_expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)
        await store.save(record)

        with pytest.raises(CodeExpiredError):
            await auth_service.verify_two_factor(USER, principal.id, notifier.last_code())

    @pytest.mark.asyncio
    async def test_code_not_requested(self, auth_service, enrolled):
        principal = await enrolled()
        with pytest.raises(CodeNotRequestedError):
            await auth_service.verify_two_factor(USER, principal.id, "123456")

    @pytest.mark.asyncio
    async def test_not_enabled(self, auth_service, create_principal):
        principal = await create_principal(USER)
        with pytest.raises(TwoFactorNotEnabledError):
            await auth_service.verify_two_factor(USER, principal.id, "123456")
        with pytest.raises(TwoFactorNotEnabledError):
            await auth_service.send_two_factor_code(USER, principal.id)

    @pytest.mark.asyncio
    async def test_resend_replaces_code(self, auth_service, enrolled, notifier):
        principal = await enrolled()
        await auth_service.login(USER, "alice@example.com", PASSWORD)
        first = notifier.last_code()

        sent = await auth_service.send_two_factor_code(USER, principal.id)
        second = notifier.last_code()

        assert sent.email == "alice@example.com"
        assert sent.expires_at > datetime.now(timezone.utc)
        if first != second:
            with pytest.raises(InvalidCodeError):
                await auth_service.verify_two_factor(USER, principal.id, first)
        assert (await auth_service.verify_two_factor(USER, principal.id, second)).verified

    @pytest.mark.asyncio
    async def test_resend_rearms_a_used_code(self, auth_service, enrolled, notifier):
        principal = await enrolled()
        await auth_service.login(USER, "alice@example.com", PASSWORD)
        await auth_service.verify_two_factor(USER, principal.id, notifier.last_code())

        await auth_service.send_two_factor_code(USER, principal.id)
        assert (await auth_service.verify_two_factor(USER, principal.id, notifier.last_code())).verified

    @pytest.mark.asyncio
    async def test_disable_clears_pending_code(self, auth_service, enrolled, store):
        principal = await enrolled()
        await auth_service.login(USER, "alice@example.com", PASSWORD)

        status = await auth_service.set_two_factor(USER, principal.id, False)

        assert status.two_factor_enabled is False
        record = await store.find_by_id(USER, principal.id)
        assert record.two_factor_code_fingerprint is None
        assert record.two_factor_code_expires_at is None
        result = await auth_service.login(USER, "alice@example.com", PASSWORD)
        assert isinstance(result, LoginResponse)

    @pytest.mark.asyncio
    async def test_enable(self, auth_service, create_principal):
        principal = await create_principal(ADMIN, username="root", email="root@example.com")
        status = await auth_service.set_two_factor(ADMIN, principal.id, True)
        assert status.two_factor_enabled is True
        result = await auth_service.login(ADMIN, "root@example.com", PASSWORD)
        assert isinstance(result, TwoFactorChallenge)

    @pytest.mark.asyncio
    async def test_notification_failure_surfaces(self, auth_service, enrolled, notifier):
        await enrolled()
        notifier.fail = True
        with pytest.raises(NotificationFailedError):
            await auth_service.login(USER, "alice@example.com", PASSWORD)

    @pytest.mark.asyncio
    async def test_open_session_refuses_suspended(self, auth_service, enrolled, principal_service):
        principal = await enrolled()
        await principal_service.set_status(USER, principal.id, "suspended")
        with pytest.raises(AccountNotActiveError):
            await auth_service.open_session(USER, principal.id)


class TestPasswordReset:
    @pytest.mark.asyncio
    async def test_acknowledgement_is_identical_for_unknown_email(self, auth_service, create_principal, notifier):
        await create_principal(USER)

        known = await auth_service.request_password_reset(USER, "alice@example.com")
        unknown = await auth_service.request_password_reset(USER, "nobody@example.com")

        assert known == unknown == PasswordResetAcknowledgement()
        assert [p for p, _, _ in notifier.sent] == ["reset"]

    @pytest.mark.asyncio
    async def test_reset_flow(self, auth_service, create_principal, notifier, store):
        principal = await create_principal(USER)
        await auth_service.request_password_reset(USER, "alice@example.com")

        await auth_service.reset_password(USER, "alice@example.com", notifier.last_code("reset"), "brand-new-pass")

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(USER, "alice@example.com", PASSWORD)
        assert isinstance(await auth_service.login(USER, "alice@example.com", "brand-new-pass"), LoginResponse)
        record = await store.find_by_id(USER, principal.id)
        assert record.reset_code_fingerprint is None

    @pytest.mark.asyncio
    async def test_reset_code_cannot_be_reused(self, auth_service, create_principal, notifier):
        await create_principal(USER)
        await auth_service.request_password_reset(USER, "alice@example.com")
        code = notifier.last_code("reset")

        await auth_service.reset_password(USER, "alice@example.com", code, "brand-new-pass")
        with pytest.raises(CodeNotRequestedError):
            await auth_service.reset_password(USER, "alice@example.com", code, "another-pass")

    @pytest.mark.asyncio
    async def test_new_reset_code_replaces_previous(self, auth_service, create_principal, notifier):
        await create_principal(USER)
        await auth_service.request_password_reset(USER, "alice@example.com")
        first = notifier.last_code("reset")
        second = first
        while second == first:
            await auth_service.request_password_reset(USER, "alice@example.com")
            second = notifier.last_code("reset")

        with pytest.raises(InvalidCodeError):
            await auth_service.reset_password(USER, "alice@example.com", first, "brand-new-pass")
        result = await auth_service.reset_password(USER, "alice@example.com", second, "brand-new-pass")
        assert result.message

    @pytest.mark.asyncio
    async def test_delivery_failure_keeps_acknowledgement(self, auth_service, create_principal, notifier):
        await create_principal(USER)
        notifier.fail = True

        known = await auth_service.request_password_reset(USER, "alice@example.com")
        unknown = await auth_service.request_password_reset(USER, "nobody@example.com")

        assert known == unknown == PasswordResetAcknowledgement()

    @pytest.mark.asyncio
    async def test_reset_unknown_email(self, auth_service):
        with pytest.raises(InvalidResetRequestError):
            await auth_service.reset_password(USER, "nobody@example.com", "123456", "brand-new-pass")

    @pytest.mark.asyncio
    async def test_reset_wrong_code(self, auth_service, create_principal, notifier):
        await create_principal(ADMIN, username="root", email="root@example.com")
        await auth_service.request_password_reset(ADMIN, "root@example.com")
        wrong = "000000" if notifier.last_code("reset") != "000000" else "111111"

        with pytest.raises(InvalidCodeError):
            await auth_service.reset_password(ADMIN, "root@example.com", wrong, "brand-new-pass")

    @pytest.mark.asyncio
    async def test_reset_expired_code(self, auth_service, create_principal, notifier, store):
        principal = await create_principal(USER)
        await auth_service.request_password_reset(USER, "alice@example.com")
        record = await store.find_by_id(USER, principal.id)
        record.reset_code_expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        await store.save(record)

        with pytest.raises(CodeExpiredError):
            await auth_service.reset_password(USER, "alice@example.com", notifier.last_code("reset"), "brand-new-pass")


class TestChangePassword:
    @pytest.mark.asyncio
    async def test_change_password(self, auth_service, create_principal):
        principal = await create_principal(USER)

        result = await auth_service.change_password(USER, principal.id, PASSWORD, "brand-new-pass")

        assert result.message
        assert isinstance(await auth_service.login(USER, "alice@example.com", "brand-new-pass"), LoginResponse)

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, auth_service, create_principal):
        principal = await create_principal(USER)
        with pytest.raises(IncorrectPasswordError):
            await auth_service.change_password(USER, principal.id, "not-it", "brand-new-pass")

    @pytest.mark.asyncio
    async def test_unknown_principal(self, auth_service):
        with pytest.raises(PrincipalNotFoundError):
            await auth_service.change_password(
                USER, "5f0c6a56-6d1c-4d7e-9d3e-1b9f0e2f4c11", PASSWORD, "brand-new-pass"
            )

    @pytest.mark.asyncio
    async def test_malformed_id(self, auth_service):
        with pytest.raises(InvalidPrincipalIdError):
            await auth_service.change_password(USER, "not-a-uuid", PASSWORD, "brand-new-pass")


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_admin_password_login(self, auth_service, create_principal, store):
        admin = await create_principal(ADMIN, username="a", email="a@x.com", password="secret1")

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(ADMIN, "a@x.com", "wrong")
        result = await auth_service.login(ADMIN, "a@x.com", "secret1")

        assert isinstance(result, LoginResponse)
        assert result.token
        record = await store.find_by_id(ADMIN, admin.id)
        assert record.last_login is not None
        assert len(record.login_history) == 1

    @pytest.mark.asyncio
    async def test_user_two_factor_login(self, auth_service, create_principal, notifier):
        user = await create_principal(USER)
        await auth_service.set_two_factor(USER, user.id, True)

        challenge = await auth_service.login(USER, "alice@example.com", PASSWORD)
        assert challenge.status == "2fa-required"

        code = notifier.last_code()
        with pytest.raises(InvalidCodeError):
            await auth_service.verify_two_factor(USER, user.id, "000000" if code != "000000" else "111111")

        assert (await auth_service.verify_two_factor(USER, user.id, code)).verified is True
        with pytest.raises(CodeAlreadyUsedError):
            await auth_service.verify_two_factor(USER, user.id, code)
