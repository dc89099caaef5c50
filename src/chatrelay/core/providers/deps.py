"""Provider lifecycle: built once in the lifespan, read per request.

``build_providers`` creates the shared ``httpx.AsyncClient``, attaches
both clients to ``app.state`` and closes the pool on shutdown.  The
``get_*`` factories can be overridden in tests via
``app.dependency_overrides[get_xxx] = ...``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from pydantic import SecretStr

from chatrelay.configs.config import AppConfig

from .dashscope import DashScopeClient
from .deepseek import DeepSeekClient

logger = logging.getLogger(__name__)

_POOL_LIMITS = httpx.Limits(max_connections=100, max_keepalive_connections=20)


def _is_blank(secret: SecretStr | None) -> bool:
    return secret is None or not secret.get_secret_value()


def _warn_missing_credentials(config: AppConfig) -> None:
    if _is_blank(config.deepseek.api_key):
        logger.warning(
            "DeepSeek API key is not set (CHATRELAY_DEEPSEEK__API_KEY); "
            "the streaming endpoint will answer 500."
        )
    if _is_blank(config.dashscope.api_key) or not config.dashscope.app_id:
        logger.warning(
            "DashScope API key or app id is not set "
            "(CHATRELAY_DASHSCOPE__API_KEY / CHATRELAY_DASHSCOPE__APP_ID); "
            "the single-shot endpoint will answer 500."
        )


@asynccontextmanager
async def build_providers(app: FastAPI, config: AppConfig) -> AsyncGenerator[None, None]:
    """Create the HTTP pool and provider clients, attach to ``app.state``."""
    _warn_missing_credentials(config)
    http_client = httpx.AsyncClient(limits=_POOL_LIMITS)
    app.state.http_client = http_client
    app.state.deepseek_client = DeepSeekClient(config.deepseek, http_client)
    app.state.dashscope_client = DashScopeClient(config.dashscope, http_client)
    try:
        yield
    finally:
        await http_client.aclose()


def get_deepseek_client(request: Request) -> DeepSeekClient:
    """FastAPI dependency, reads from ``app.state``."""
    return request.app.state.deepseek_client


def get_dashscope_client(request: Request) -> DashScopeClient:
    """FastAPI dependency, reads from ``app.state``."""
    return request.app.state.dashscope_client
