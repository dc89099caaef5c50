"""Streaming chat service: prompt injection plus the DeepSeek stream."""

from __future__ import annotations

from collections.abc import Sequence

import httpx

from chatrelay.core.models import ROLE_SYSTEM, ROLE_USER, Message
from chatrelay.core.prompts import PromptLoader, Prompts
from chatrelay.core.providers.deepseek import DeepSeekClient


def build_messages(
    messages: Sequence[Message],
    prompts: Prompts,
    *,
    user_prompt_separator: str = "\n\n",
) -> list[Message]:
    """Assemble the upstream conversation.

    A non-empty system prompt becomes a leading system turn.  A non-empty
    user prompt is appended to the final turn when that turn is from the
    user; the caller's messages are never modified in place.
    """
    result: list[Message] = []
    if prompts.system_prompt:
        result.append(Message(role=ROLE_SYSTEM, content=prompts.system_prompt))
    result.extend(messages)

    if prompts.user_prompt and result and result[-1].role == ROLE_USER:
        last = result[-1]
        result[-1] = last.model_copy(
            update={
                "content": f"{last.content}{user_prompt_separator}{prompts.user_prompt}"
            }
        )
    return result


class StreamingChatService:
    """Opens the upstream stream for one chat request."""

    chat_service_name = "deepseek"

    def __init__(
        self,
        client: DeepSeekClient,
        prompt_loader: PromptLoader,
        *,
        user_prompt_separator: str = "\n\n",
    ) -> None:
        self._client = client
        self._prompt_loader = prompt_loader
        self._separator = user_prompt_separator

    async def open(self, messages: Sequence[Message]) -> httpx.Response:
        """Return the open upstream response; the caller must close it."""
        prompts = self._prompt_loader.load()
        request_messages = build_messages(
            messages, prompts, user_prompt_separator=self._separator
        )
        return await self._client.open_stream(request_messages)
