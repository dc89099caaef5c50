"""Single-shot chat service backed by DashScope."""

from __future__ import annotations

from collections.abc import Sequence

from chatrelay.core.models import ROLE_USER, Message
from chatrelay.core.providers.dashscope import DashScopeClient


def select_prompt(messages: Sequence[Message], default_prompt: str) -> str:
    """Content of the most recent user turn, else *default_prompt*.

    The provider is single-turn, so earlier history is not forwarded.
    """
    for message in reversed(messages):
        if message.role == ROLE_USER:
            return message.content or default_prompt
    return default_prompt


class CompletionChatService:
    chat_service_name = "dashscope"

    def __init__(self, client: DashScopeClient, default_prompt: str) -> None:
        self._client = client
        self._default_prompt = default_prompt

    async def complete(self, messages: Sequence[Message]) -> str:
        """Return the provider's output text.

        Raises:
            EmptyCompletion: the response had no ``output.text``.
        """
        prompt = select_prompt(messages, self._default_prompt)
        response = await self._client.complete(prompt)
        return response.text
