"""DashScope application-completion client (single-turn, non-streaming)."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx
from pydantic import ValidationError

from chatrelay.configs.system import DashScopeConfig
from chatrelay.core.metrics import UPSTREAM_LATENCY_SECONDS, UPSTREAM_REQUESTS_TOTAL
from chatrelay.infra.telemetry import (
    ATTR_UPSTREAM_PROMPT_LEN,
    ATTR_UPSTREAM_STATUS,
    SPAN_UPSTREAM_DASHSCOPE,
    tracer,
)

from .errors import (
    EmptyCompletion,
    ProviderNotConfigured,
    UpstreamError,
    UpstreamTimeout,
)
from .models import DashScopeInput, DashScopeRequest, DashScopeResponse

logger = logging.getLogger(__name__)

PROVIDER_NAME = "dashscope"


class DashScopeClient:
    """Calls ``/apps/{app_id}/completion`` with a bounded wait."""

    name = PROVIDER_NAME

    def __init__(self, config: DashScopeConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    @property
    def timeout_seconds(self) -> float:
        return self._config.timeout.total_seconds()

    def _credentials(self) -> tuple[str, str]:
        key = self._config.api_key
        if key is None or not key.get_secret_value():
            raise ProviderNotConfigured("DASHSCOPE_API_KEY is not configured")
        if not self._config.app_id:
            raise ProviderNotConfigured("DASHSCOPE_APP_ID is not configured")
        return key.get_secret_value(), self._config.app_id

    def completion_url(self, app_id: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/apps/{app_id}/completion"

    async def complete(self, prompt: str) -> DashScopeResponse:
        """Send *prompt* and return the parsed completion.

        The whole exchange (headers and body) runs inside one
        ``asyncio.timeout`` scope; on expiry the in-flight request is
        cancelled and ``UpstreamTimeout`` is raised.

        Raises:
            ProviderNotConfigured: key or app id missing (no request is sent).
            UpstreamTimeout: no complete response within the configured bound.
            UpstreamError: the provider answered with a non-success status.
            EmptyCompletion: a 2xx body without text at ``output.text``; the
                parsed body is attached as-is.
        """
        api_key, app_id = self._credentials()
        url = self.completion_url(app_id)
        body = DashScopeRequest(input=DashScopeInput(prompt=prompt))
        timeout = self.timeout_seconds

        logger.info("Calling DashScope API: %s", url)
        with tracer.start_as_current_span(SPAN_UPSTREAM_DASHSCOPE) as span:
            span.set_attribute(ATTR_UPSTREAM_PROMPT_LEN, len(prompt))
            start = time.monotonic()
            try:
                async with asyncio.timeout(timeout):
                    response = await self._http.post(
                        url,
                        json=body.model_dump(mode="json"),
                        headers={
                            "Authorization": f"Bearer {api_key}",
                            "Accept": "application/json",
                        },
                        timeout=None,
                    )
            except (TimeoutError, httpx.TimeoutException):
                UPSTREAM_REQUESTS_TOTAL.labels(provider=self.name, outcome="timeout").inc()
                logger.warning("DashScope API request timed out after %gs", timeout)
                raise UpstreamTimeout(timeout) from None
            except httpx.HTTPError:
                UPSTREAM_REQUESTS_TOTAL.labels(provider=self.name, outcome="error").inc()
                raise
            UPSTREAM_LATENCY_SECONDS.labels(provider=self.name).observe(
                time.monotonic() - start
            )
            span.set_attribute(ATTR_UPSTREAM_STATUS, response.status_code)

        logger.info("DashScope response status: %s", response.status_code)
        if not response.is_success:
            UPSTREAM_REQUESTS_TOTAL.labels(provider=self.name, outcome="http_error").inc()
            logger.error(
                "DashScope API error (HTTP %s): %s", response.status_code, response.text
            )
            raise UpstreamError(
                response.status_code,
                response.text,
                request_id=response.headers.get(self._config.request_id_header),
            )

        UPSTREAM_REQUESTS_TOTAL.labels(provider=self.name, outcome="ok").inc()
        payload = response.json()
        try:
            parsed = DashScopeResponse.model_validate(payload)
        except ValidationError:
            parsed = None
        if parsed is None or not parsed.text:
            logger.error("DashScope response has no output text: %s", payload)
            raise EmptyCompletion(payload)
        return parsed
