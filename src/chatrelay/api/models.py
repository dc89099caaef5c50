"""Pydantic models for the chat API."""

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from chatrelay.core.models import Message

MESSAGES_REQUIRED_ERROR = "Messages are required"


class ChatRequest(BaseModel):
    """Request body shared by both chat endpoints."""

    messages: list[Message] = Field(
        description="Conversation in chronological order, newest turn last",
    )


class CompletionResponse(BaseModel):
    """Single-shot chat response."""

    content: str = Field(description="Assistant reply text")


def error_response(status_code: int, **content: Any) -> JSONResponse:
    """JSON error body with the given fields, e.g. ``{"error": ...}``."""
    return JSONResponse(status_code=status_code, content=content)
