"""FastAPI application."""

from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from idp.config import Settings
from idp.interface.api.routes import api_keys, auth, health, partner
from idp.interface.error import register_error_handlers
from idp.util.di.container import create_container, setup_di
from idp.util.observability import SERVICE_VERSION, instrument_fastapi, instrument_httpx


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Logfire should be configured before calling this function; start_app.py
    does so in production.

    Args:
        container: DI container to use; tests pass one built from mock providers
    """
    settings = Settings()

    instrument_httpx()

    app_instance = FastAPI(
        title="Identity Provider API",
        description="Shared sign-in, credential linking and partner API keys for a family of sites",
        version=SERVICE_VERSION,
    )

    instrument_fastapi(app_instance)

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Accept",
            "Origin",
            settings.api_keys.header_name,
        ],
        max_age=600,
    )

    setup_di(app_instance, container or create_container())
    register_error_handlers(app_instance)

    app_instance.include_router(health.router)
    app_instance.include_router(auth.router)
    app_instance.include_router(api_keys.router)
    app_instance.include_router(partner.router)

    return app_instance
