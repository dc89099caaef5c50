"""Centralized FastAPI dependency type aliases.

Import these ``*Dep`` aliases in route modules instead of manually
writing ``Annotated[T, Depends(get_xxx)]`` everywhere.  Each alias
corresponds to a single ``get_*`` factory and can be overridden in
tests via ``app.dependency_overrides[get_xxx] = ...``.
"""

from typing import Annotated

from fastapi import Depends

from chatrelay.core.service.completion import CompletionChatService
from chatrelay.core.service.deps import (
    get_completion_chat_service,
    get_streaming_chat_service,
)
from chatrelay.core.service.streaming import StreamingChatService

StreamingChatServiceDep = Annotated[
    StreamingChatService, Depends(get_streaming_chat_service)
]
CompletionChatServiceDep = Annotated[
    CompletionChatService, Depends(get_completion_chat_service)
]
