"""FastAPI dependency factories for chat services.

Services are cheap per-request wrappers; the provider clients they use
come from ``app.state`` via their own ``Depends`` factories.
"""

from typing import Annotated

from fastapi import Depends

from chatrelay.configs.config import AppConfig, get_config
from chatrelay.core.prompts import PromptLoader
from chatrelay.core.providers import (
    DashScopeClient,
    DeepSeekClient,
    get_dashscope_client,
    get_deepseek_client,
)

from .completion import CompletionChatService
from .streaming import StreamingChatService


def get_prompt_loader(
    config: Annotated[AppConfig, Depends(get_config)],
) -> PromptLoader:
    return PromptLoader(config.prompt)


def get_streaming_chat_service(
    client: Annotated[DeepSeekClient, Depends(get_deepseek_client)],
    prompt_loader: Annotated[PromptLoader, Depends(get_prompt_loader)],
    config: Annotated[AppConfig, Depends(get_config)],
) -> StreamingChatService:
    return StreamingChatService(
        client,
        prompt_loader,
        user_prompt_separator=config.prompt.user_prompt_separator,
    )


def get_completion_chat_service(
    client: Annotated[DashScopeClient, Depends(get_dashscope_client)],
    config: Annotated[AppConfig, Depends(get_config)],
) -> CompletionChatService:
    return CompletionChatService(client, config.dashscope.default_prompt)
