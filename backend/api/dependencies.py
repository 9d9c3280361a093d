"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

The container is built by create_app() and stored on app.state; the
database handle it owns is opened and closed by the application lifespan.
"""

from datetime import timedelta
from typing import TYPE_CHECKING, Optional

from fastapi import Depends, Request

from shared.config import Settings, get_settings
from shared.database import Database

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.gate import AuthorizationGate
    from modules.auth.hashing import PasswordHasher
    from modules.auth.interfaces import IAuthService
    from modules.auth.tokens import TokenIssuer
    from modules.notifications.interfaces import INotifier
    from modules.principals.interfaces import IPrincipalService, IPrincipalStore


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached. Any collaborator
    can be injected up front, which is how tests swap in an in-memory store
    and a recording notifier.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        database: Optional[Database] = None,
        store: "IPrincipalStore | None" = None,
        notifier: "INotifier | None" = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._database = database
        self._store = store
        self._store_injected = store is not None
        self._notifier = notifier
        self._hasher: "PasswordHasher | None" = None
        self._tokens: "TokenIssuer | None" = None
        self._auth_service: "IAuthService | None" = None
        self._principal_service: "IPrincipalService | None" = None
        self._gate: "AuthorizationGate | None" = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def uses_database(self) -> bool:
        return not self._store_injected and self.settings.store_backend == "supabase"

    @property
    def database(self) -> Database:
        if self._database is None:
            self._database = Database(self.settings)
        return self._database

    def open(self) -> None:
        """Acquire external resources (the Supabase client) if needed."""
        if self.uses_database:
            self.database.open()

    def close(self) -> None:
        if self._database is not None:
            self._database.close()
        self.reset()

    # -------------------------------------------------------------------------
    # Components
    # -------------------------------------------------------------------------

    @property
    def store(self) -> "IPrincipalStore":
        """Get the principal store for the configured backend."""
        if self._store is None:
            if self.settings.store_backend == "memory":
                from modules.principals.memory import InMemoryPrincipalStore
                self._store = InMemoryPrincipalStore()
            else:
                from modules.principals.repository import SupabasePrincipalRepository
                self._store = SupabasePrincipalRepository(self.database.client)
        return self._store

    @property
    def notifier(self) -> "INotifier":
        if self._notifier is None:
            from modules.notifications.smtp import SmtpNotifier
            self._notifier = SmtpNotifier(self.settings)
        return self._notifier

    @property
    def hasher(self) -> "PasswordHasher":
        if self._hasher is None:
            from modules.auth.hashing import PasswordHasher
            self._hasher = PasswordHasher()
        return self._hasher

    @property
    def tokens(self) -> "TokenIssuer":
        if self._tokens is None:
            from modules.auth.tokens import TokenIssuer
            self._tokens = TokenIssuer.from_settings(self.settings)
        return self._tokens

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(
                store=self.store,
                hasher=self.hasher,
                tokens=self.tokens,
                notifier=self.notifier,
                otp_ttl=timedelta(minutes=self.settings.otp_ttl_minutes),
                login_history_limit=self.settings.login_history_limit,
            )
        return self._auth_service

    @property
    def principals(self) -> "IPrincipalService":
        """Get the principal management service instance."""
        if self._principal_service is None:
            from modules.principals.service import PrincipalService
            self._principal_service = PrincipalService(
                store=self.store,
                hasher=self.hasher,
                max_page_size=self.settings.max_page_size,
            )
        return self._principal_service

    @property
    def gate(self) -> "AuthorizationGate":
        if self._gate is None:
            from modules.auth.gate import AuthorizationGate
            self._gate = AuthorizationGate(tokens=self.tokens, store=self.store)
        return self._gate

    def reset(self) -> None:
        """
        Drop cached services and any store built from the database client.

        Injected collaborators are kept; primarily used for testing.
        """
        if self.uses_database:
            self._store = None
        self._auth_service = None
        self._principal_service = None
        self._gate = None
        self._tokens = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency for the app's service container."""
    return request.app.state.container


def get_auth_service(container: ServiceContainer = Depends(get_container)) -> "IAuthService":
    """FastAPI dependency for auth service."""
    return container.auth


def get_principal_service(container: ServiceContainer = Depends(get_container)) -> "IPrincipalService":
    """FastAPI dependency for principal management service."""
    return container.principals


def get_gate(container: ServiceContainer = Depends(get_container)) -> "AuthorizationGate":
    """FastAPI dependency for the authorization gate."""
    return container.gate
