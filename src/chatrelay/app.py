"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from chatrelay import __version__
from chatrelay.api.chat import router as chat_router
from chatrelay.api.completion import router as completion_router
from chatrelay.api.exceptions import register_exception_handlers
from chatrelay.api.health import router as health_router
from chatrelay.configs.config import AppConfig, get_app_config
from chatrelay.core.providers import build_providers
from chatrelay.infra.logging import setup_logging
from chatrelay.infra.telemetry import init_telemetry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the shared upstream HTTP pool for the app's lifetime."""
    config: AppConfig = app.state.config
    async with build_providers(app, config):
        logger.info("Starting chatrelay %s", __version__)
        yield
        logger.info("Shutting down chatrelay")


def get_app(config: AppConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    *config* is captured once and handed to every handler via
    ``app.state``; omit it to read the environment and config files.
    """
    if config is None:
        config = get_app_config()

    setup_logging(config.logging)

    app = FastAPI(
        title="chatrelay",
        description="Chat relay for streaming and single-shot LLM providers",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    register_exception_handlers(app)

    app.include_router(chat_router, prefix=config.api.prefix)
    app.include_router(completion_router, prefix=config.api.prefix)
    app.include_router(health_router)

    init_telemetry(app, config.tracing)

    return app


app = get_app()
