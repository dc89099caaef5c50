"""DeepSeek streaming chat-completions client.

``open_stream`` returns the upstream response with its body still
unread so the relay can consume it incrementally; the caller owns
closing it.  Non-success statuses are turned into ``UpstreamError``
after the error body has been read and the connection released.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

import httpx

from chatrelay.configs.system import DeepSeekConfig
from chatrelay.core.metrics import UPSTREAM_LATENCY_SECONDS, UPSTREAM_REQUESTS_TOTAL
from chatrelay.core.models import Message
from chatrelay.infra.telemetry import (
    ATTR_UPSTREAM_MESSAGES,
    ATTR_UPSTREAM_STATUS,
    SPAN_UPSTREAM_DEEPSEEK,
    tracer,
)

from .errors import ProviderNotConfigured, UpstreamError
from .models import ProviderRequestFrame

logger = logging.getLogger(__name__)

PROVIDER_NAME = "deepseek"
REQUEST_ID_HEADER = "x-request-id"


class DeepSeekClient:
    """Streaming client for an OpenAI-compatible ``/chat/completions``."""

    name = PROVIDER_NAME

    def __init__(self, config: DeepSeekConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    @property
    def completions_url(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/chat/completions"

    def build_frame(self, messages: Sequence[Message]) -> ProviderRequestFrame:
        return ProviderRequestFrame(
            model=self._config.model,
            messages=list(messages),
            stream=True,
            temperature=self._config.temperature,
        )

    def _api_key(self) -> str:
        key = self._config.api_key
        if key is None or not key.get_secret_value():
            raise ProviderNotConfigured("DEEPSEEK_API_KEY is not configured")
        return key.get_secret_value()

    async def open_stream(self, messages: Sequence[Message]) -> httpx.Response:
        """Send the chat request with ``stream=true`` and return the open response.

        Raises:
            ProviderNotConfigured: the API key is missing (no request is sent).
            UpstreamError: the provider answered with a non-success status.
        """
        api_key = self._api_key()
        frame = self.build_frame(messages)
        request = self._http.build_request(
            "POST",
            self.completions_url,
            json=frame.model_dump(mode="json"),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "text/event-stream",
            },
            timeout=httpx.Timeout(
                None, connect=self._config.connect_timeout.total_seconds()
            ),
        )

        with tracer.start_as_current_span(SPAN_UPSTREAM_DEEPSEEK) as span:
            span.set_attribute(ATTR_UPSTREAM_MESSAGES, len(frame.messages))
            start = time.monotonic()
            try:
                response = await self._http.send(request, stream=True)
            except httpx.HTTPError:
                UPSTREAM_REQUESTS_TOTAL.labels(provider=self.name, outcome="error").inc()
                raise
            UPSTREAM_LATENCY_SECONDS.labels(provider=self.name).observe(
                time.monotonic() - start
            )
            span.set_attribute(ATTR_UPSTREAM_STATUS, response.status_code)

            if response.is_success:
                UPSTREAM_REQUESTS_TOTAL.labels(provider=self.name, outcome="ok").inc()
                return response

            try:
                await response.aread()
                body = response.text
            finally:
                await response.aclose()

        UPSTREAM_REQUESTS_TOTAL.labels(provider=self.name, outcome="http_error").inc()
        logger.error(
            "DeepSeek API error (HTTP %s): %s", response.status_code, body
        )
        raise UpstreamError(
            response.status_code,
            body,
            request_id=response.headers.get(REQUEST_ID_HEADER),
        )
