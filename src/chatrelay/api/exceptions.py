"""Global exception handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chatrelay.core.providers import ProviderNotConfigured

from .models import MESSAGES_REQUIRED_ERROR

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers on ``app``."""

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(
            "Rejected request to %s: %d validation error(s)",
            request.url.path,
            len(exc.errors()),
        )
        return JSONResponse(
            status_code=400,
            content={"error": MESSAGES_REQUIRED_ERROR},
        )

    @app.exception_handler(ProviderNotConfigured)
    async def handle_provider_not_configured(
        request: Request, exc: ProviderNotConfigured
    ) -> JSONResponse:
        logger.error("Provider not configured for %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})
