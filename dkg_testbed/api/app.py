"""
DKG Testbed - FastAPI Application

One process serves one testbed session: the coordinator lives in
``app.state.coordinator`` for the lifetime of the app.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from .. import __version__
from ..client import ClientFactory, default_sdk_provider, wait_for_sdk
from ..config import NEUROWEB_TESTNET, Settings, get_settings
from ..errors import ConfigurationError
from ..monitoring import configure_logging
from ..session import SessionCoordinator
from .routes import APIResponse, create_testbed_router

logger = structlog.get_logger(__name__)


def _build_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        coordinator: SessionCoordinator = app.state.coordinator
        provider = coordinator.factory.sdk_provider
        try:
            await wait_for_sdk(
                provider,
                timeout=settings.sdk_wait_timeout_seconds,
                poll_interval=settings.sdk_poll_interval_seconds,
            )
        except ConfigurationError as e:
            # Still serve: initialization requests will report the same error.
            logger.warning("dkg_sdk_unavailable", provider=repr(provider), error=e.message)
        logger.info("testbed_started", network=NEUROWEB_TESTNET.blockchain.name)
        try:
            yield
        finally:
            coordinator.reset()
            logger.info("testbed_stopped")

    return lifespan


def create_app(
    coordinator: SessionCoordinator | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        coordinator: Session coordinator to serve (built from settings if omitted)
        settings: Settings override (defaults to get_settings())

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    if coordinator is None:
        factory = ClientFactory(default_sdk_provider(settings), NEUROWEB_TESTNET)
        coordinator = SessionCoordinator(factory)

    docs_url = None if settings.environment == "production" else "/docs"

    app = FastAPI(
        title="DKG Testbed",
        description="Publish and retrieve knowledge assets on the NeuroWeb testnet",
        version=__version__,
        docs_url=docs_url,
        redoc_url=None,
        lifespan=_build_lifespan(settings),
        openapi_tags=[
            {"name": "Session", "description": "Wallet configuration and session state"},
            {"name": "Assets", "description": "Knowledge asset publish and retrieve"},
        ],
    )
    app.state.coordinator = coordinator

    app.include_router(create_testbed_router())

    @app.get("/health", response_model=APIResponse, tags=["Session"])
    async def health() -> APIResponse:
        return APIResponse(
            data={
                "status": "ok",
                "initialized": coordinator.initialized,
                "sdk_available": coordinator.factory.sdk_provider.is_available(),
            }
        )

    return app


def main() -> None:
    """Run the testbed API with uvicorn."""
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_output=settings.log_json,
    )
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
