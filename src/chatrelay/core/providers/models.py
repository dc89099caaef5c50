"""Typed request and response payloads for the upstream providers.

Upstream responses are validated into explicit models with optional
fields, so missing keys default instead of being looked up at runtime.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from chatrelay.core.models import Message

# ---------------------------------------------------------------------------
# DeepSeek (OpenAI-compatible chat completions)
# ---------------------------------------------------------------------------


class ProviderRequestFrame(BaseModel):
    """Request body for a streaming chat-completions call."""

    model: str
    messages: list[Message]
    stream: bool = True
    temperature: float


class ChunkDelta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str | None = None


class ChunkChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    delta: ChunkDelta = Field(default_factory=ChunkDelta)


class ChatCompletionChunk(BaseModel):
    """One ``chat.completion.chunk`` SSE payload."""

    model_config = ConfigDict(extra="ignore")

    choices: list[ChunkChoice] = Field(default_factory=list)

    @property
    def delta_content(self) -> str:
        """Text of ``choices[0].delta.content`` or ``""``."""
        if not self.choices:
            return ""
        return self.choices[0].delta.content or ""


# ---------------------------------------------------------------------------
# DashScope application completion
# ---------------------------------------------------------------------------


class DashScopeInput(BaseModel):
    prompt: str


class DashScopeRequest(BaseModel):
    """Request body for ``/apps/{app_id}/completion``."""

    input: DashScopeInput
    parameters: dict[str, Any] = Field(default_factory=dict)
    debug: dict[str, Any] = Field(default_factory=dict)


class DashScopeOutput(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: str | None = None


class DashScopeResponse(BaseModel):
    """Completion response; unknown fields are kept for diagnostics."""

    model_config = ConfigDict(extra="allow")

    output: DashScopeOutput | None = None
    request_id: str | None = None

    @property
    def text(self) -> str:
        if self.output is None:
            return ""
        return self.output.text or ""
