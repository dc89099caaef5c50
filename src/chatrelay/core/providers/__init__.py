"""Upstream LLM provider clients.

Two providers are proxied:

1. **DeepSeek**: OpenAI-compatible chat completions, consumed as an
   SSE stream (``DeepSeekClient.open_stream``).
2. **DashScope**: single-turn application completion with a bounded
   wait (``DashScopeClient.complete``).

Both share one pooled ``httpx.AsyncClient`` created in the lifespan
(``build_providers``) and are read from ``app.state`` per request.
"""

from .dashscope import DashScopeClient
from .deepseek import DeepSeekClient
from .deps import build_providers, get_dashscope_client, get_deepseek_client
from .errors import (
    EmptyCompletion,
    ProviderError,
    ProviderNotConfigured,
    UpstreamError,
    UpstreamTimeout,
)

__all__ = [
    "DashScopeClient",
    "DeepSeekClient",
    "EmptyCompletion",
    "ProviderError",
    "ProviderNotConfigured",
    "UpstreamError",
    "UpstreamTimeout",
    "build_providers",
    "get_dashscope_client",
    "get_deepseek_client",
]
