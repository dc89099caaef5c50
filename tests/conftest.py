"""Shared fixtures: config factory, recording mock upstreams, test app."""

import json
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi import FastAPI

from chatrelay.app import get_app
from chatrelay.configs.config import AppConfig
from chatrelay.configs.system import (
    DashScopeConfig,
    DeepSeekConfig,
    LoggingConfig,
    PromptConfig,
)
from chatrelay.core.providers import (
    DashScopeClient,
    DeepSeekClient,
    get_dashscope_client,
    get_deepseek_client,
)


class RecordingTransport(httpx.MockTransport):
    """``httpx.MockTransport`` that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.requests: list[httpx.Request] = []

        async def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            response = handler(request)
            if not isinstance(response, httpx.Response):
                response = await response
            return response

        super().__init__(recording_handler)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


def delta_frame(content: str) -> str:
    """One upstream ``chat.completion.chunk`` SSE event."""
    payload = {"choices": [{"index": 0, "delta": {"content": content}}]}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


DONE_FRAME = "data: [DONE]\n\n"


@pytest.fixture
def prompt_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def make_config(prompt_dir: Path) -> Callable[..., AppConfig]:
    """Build an ``AppConfig`` isolated from the environment and repo files."""

    def _make(
        *,
        deepseek_api_key: str | None = "sk-deepseek-test",
        dashscope_api_key: str | None = "sk-dashscope-test",
        dashscope_app_id: str | None = "app-test",
        dashscope_timeout: float = 10.0,
    ) -> AppConfig:
        return AppConfig(
            deepseek=DeepSeekConfig(api_key=deepseek_api_key),
            dashscope=DashScopeConfig(
                api_key=dashscope_api_key,
                app_id=dashscope_app_id,
                timeout=timedelta(seconds=dashscope_timeout),
            ),
            prompt=PromptConfig(
                system_prompt_file=prompt_dir / "system_prompt.txt",
                user_prompt_file=prompt_dir / "user_prompt.txt",
            ),
            logging=LoggingConfig(json_output=False),
        )

    return _make


@pytest.fixture
def make_app() -> Callable[..., FastAPI]:
    """Build the app with provider clients wired to mock transports."""

    def _make(
        config: AppConfig,
        *,
        deepseek: httpx.AsyncBaseTransport | None = None,
        dashscope: httpx.AsyncBaseTransport | None = None,
    ) -> FastAPI:
        app = get_app(config)
        if deepseek is not None:
            client = DeepSeekClient(config.deepseek, httpx.AsyncClient(transport=deepseek))
            app.dependency_overrides[get_deepseek_client] = lambda: client
        if dashscope is not None:
            ds_client = DashScopeClient(
                config.dashscope, httpx.AsyncClient(transport=dashscope)
            )
            app.dependency_overrides[get_dashscope_client] = lambda: ds_client
        return app

    return _make
