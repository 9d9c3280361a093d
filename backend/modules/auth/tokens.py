"""
Signed bearer tokens.

Two token kinds exist and they are not interchangeable: session tokens and
2FA-pending tokens are issued for different JWT audiences, so verifying a
token as a session rejects a pending token at the signature-check stage.
"""

from datetime import datetime, timedelta, timezone
from typing import Union

import jwt  # PyJWT
from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings
from modules.principals.models import PrincipalRecord

from .exceptions import ExpiredTokenError, InvalidTokenError, MissingTokenError
from .models import JWTPayload, PendingClaims, SessionClaims, TokenClaims

SESSION_AUDIENCE = "session"
PENDING_AUDIENCE = "2fa-pending"

_REQUIRED_CLAIMS = ["sub", "kind", "aud", "iss", "exp", "iat"]


class TokenIssuer:
    """Issues and verifies HMAC-signed JWTs for both token kinds."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        issuer: str = "gatehouse",
        session_ttl: timedelta = timedelta(days=1),
        pending_ttl: timedelta = timedelta(minutes=10),
    ):
        if not secret:
            raise RuntimeError(
                "JWT secret is not configured. Set GATEHOUSE_JWT_SECRET."
            )
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self.session_ttl = session_ttl
        self.pending_ttl = pending_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer,
            session_ttl=timedelta(minutes=settings.session_token_ttl_minutes),
            pending_ttl=timedelta(minutes=settings.pending_token_ttl_minutes),
        )

    def audience_for(self, claims: Union[TokenClaims, type]) -> str:
        claims_type = claims if isinstance(claims, type) else type(claims)
        suffix = SESSION_AUDIENCE if claims_type is SessionClaims else PENDING_AUDIENCE
        return f"{self._issuer}:{suffix}"

    # -------------------------------------------------------------------------
    # Issue
    # -------------------------------------------------------------------------

    def issue(self, claims: TokenClaims, ttl: timedelta) -> str:
        """
        Sign a token for the given claims.

        The claims type picks the audience; the expiry is now + ttl.
        """
        if not isinstance(claims, (SessionClaims, PendingClaims)):
            raise TypeError(f"Unsupported claims type: {type(claims).__name__}")

        now = datetime.now(timezone.utc)
        payload = claims.model_dump(mode="json")
        payload.update(
            {
                "aud": self.audience_for(claims),
                "iss": self._issuer,
                "iat": int(now.timestamp()),
                "exp": int((now + ttl).timestamp()),
            }
        )
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def issue_session(self, record: PrincipalRecord) -> str:
        claims = SessionClaims(sub=record.id, kind=record.kind, role=record.role)
        return self.issue(claims, self.session_ttl)

    def issue_pending(self, record: PrincipalRecord) -> str:
        claims = PendingClaims(sub=record.id, kind=record.kind)
        return self.issue(claims, self.pending_ttl)

    # -------------------------------------------------------------------------
    # Verify
    # -------------------------------------------------------------------------

    def verify_session(self, token: str) -> SessionClaims:
        """
        Raises:
            MissingTokenError: If token is empty
            ExpiredTokenError: If token is past its expiry
            InvalidTokenError: On any other failure, including pending tokens
        """
        payload = self._decode(token, SessionClaims)
        if not payload.role:
            raise InvalidTokenError()
        return SessionClaims(sub=payload.sub, kind=payload.kind, role=payload.role)

    def verify_pending(self, token: str) -> PendingClaims:
        """Same failures as verify_session; session tokens are rejected."""
        payload = self._decode(token, PendingClaims)
        return PendingClaims(sub=payload.sub, kind=payload.kind)

    def _decode(self, token: str, claims_type: type) -> JWTPayload:
        if not token:
            raise MissingTokenError()

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self.audience_for(claims_type),
                issuer=self._issuer,
                options={"require": _REQUIRED_CLAIMS},
            )
            return JWTPayload(**payload)
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError:
            raise InvalidTokenError()
        except PydanticValidationError:
            raise InvalidTokenError()
