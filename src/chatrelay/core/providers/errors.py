"""Provider-side exceptions, mapped to HTTP responses by the API layer."""

from __future__ import annotations

from typing import Any


class ProviderError(Exception):
    """Base class for upstream provider failures."""


class ProviderNotConfigured(ProviderError):
    """A credential or identifier the provider needs is not set."""


class UpstreamError(ProviderError):
    """The provider answered with a non-success HTTP status."""

    def __init__(
        self,
        status_code: int,
        provider_message: str,
        *,
        request_id: str | None = None,
    ) -> None:
        super().__init__(f"Upstream returned HTTP {status_code}")
        self.status_code = status_code
        self.provider_message = provider_message
        self.request_id = request_id


class UpstreamTimeout(ProviderError):
    """The provider did not answer within the configured bound."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"No upstream response within {timeout_seconds:g} seconds")
        self.timeout_seconds = timeout_seconds


class EmptyCompletion(ProviderError):
    """A successful response carried no output text."""

    def __init__(self, payload: Any) -> None:
        super().__init__("Upstream response has no output text")
        self.payload = payload
