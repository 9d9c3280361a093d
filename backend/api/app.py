"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config import Settings, get_settings
from shared.logger import configure_logging
from shared.models import PrincipalKind
from modules.auth.routes import build_auth_router
from modules.principals.routes import build_principal_router

from .dependencies import ServiceContainer
from .middleware.errors import register_exception_handlers
from .routes import health

logger = logging.getLogger(__name__)

MOUNTS = {
    PrincipalKind.USER: "/api/users",
    PrincipalKind.ADMIN: "/api/admins",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Opens the container's external resources on startup and releases them
    on shutdown.
    """
    container: ServiceContainer = app.state.container
    settings = container.settings

    configure_logging(settings.log_level)
    container.open()
    logger.info("Starting %s on %s:%s (store: %s)", settings.app_name, settings.host, settings.port, settings.store_backend)
    try:
        yield
    finally:
        container.close()
        logger.info("Shutting down %s", settings.app_name)


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use; defaults to the cached environment settings
        container: Prebuilt service container, mainly for tests

    Returns:
        Configured FastAPI instance
    """
    if container is None:
        container = ServiceContainer(settings or get_settings())
    settings = container.settings

    app = FastAPI(
        title=settings.app_name,
        description="Principal management and authentication API",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )
    app.state.container = container

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_exception_handlers(app, debug=settings.debug)

    # Register routes. Auth routes go first so /me wins over /{principal_id}.
    app.include_router(health.router, prefix="/api", tags=["health"])
    for kind, prefix in MOUNTS.items():
        tag = f"{kind.value}s"
        app.include_router(build_auth_router(kind), prefix=prefix, tags=[tag])
        app.include_router(build_principal_router(kind), prefix=prefix, tags=[tag])

    return app


# Application instance for uvicorn
app = create_app()
