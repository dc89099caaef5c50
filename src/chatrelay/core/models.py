"""Conversation and stream models shared by the service layer."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_SYSTEM = "system"

Role = Literal["user", "assistant", "system"]

DONE_SENTINEL = "[DONE]"


class Message(BaseModel):
    """A single conversation turn."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Message sender role")
    content: str = Field(description="Message content")


class StreamFragment(BaseModel):
    """One decoded delta of assistant text."""

    content: str = Field(description="Incremental text")


class StreamDone(BaseModel):
    """End-of-stream marker; nothing follows it."""


RelayEvent = StreamFragment | StreamDone
