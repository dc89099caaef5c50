"""Endpoint tests for POST /api/dashscope (single-shot completion)."""

import asyncio
import time

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import RecordingTransport


def _ok(text: str = "你好！有什么可以帮你？") -> RecordingTransport:
    return RecordingTransport(
        lambda request: httpx.Response(
            200, json={"output": {"text": text, "finish_reason": "stop"}, "request_id": "r-1"}
        )
    )


def _post(app, body: dict) -> httpx.Response:
    with TestClient(app) as client:
        return client.post("/api/dashscope", json=body)


# ---------------------------------------------------------------------------
# Success path
# ---------------------------------------------------------------------------


class TestCompletionSuccess:
    def test_returns_output_text(self, make_config, make_app):
        upstream = _ok("Hello!")
        app = make_app(make_config(), dashscope=upstream)

        response = _post(app, {"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 200
        assert response.json() == {"content": "Hello!"}

    def test_upstream_request_shape(self, make_config, make_app):
        upstream = _ok()
        config = make_config(dashscope_api_key="sk-ds", dashscope_app_id="app-42")
        app = make_app(config, dashscope=upstream)

        _post(app, {"messages": [{"role": "user", "content": "hi"}]})

        request = upstream.requests[0]
        assert str(request.url) == (
            "https://dashscope.aliyuncs.com/api/v1/apps/app-42/completion"
        )
        assert request.headers["authorization"] == "Bearer sk-ds"
        assert upstream.last_json() == {
            "input": {"prompt": "hi"},
            "parameters": {},
            "debug": {},
        }

    def test_forwards_only_latest_user_turn(self, make_config, make_app):
        upstream = _ok()
        app = make_app(make_config(), dashscope=upstream)

        _post(
            app,
            {
                "messages": [
                    {"role": "user", "content": "first"},
                    {"role": "assistant", "content": "answer"},
                    {"role": "user", "content": "second"},
                    {"role": "assistant", "content": "trailing"},
                ]
            },
        )

        assert upstream.last_json()["input"]["prompt"] == "second"

    @pytest.mark.parametrize(
        "messages",
        [
            [],
            [{"role": "assistant", "content": "only me"}],
            [{"role": "user", "content": ""}],
        ],
    )
    def test_default_prompt_without_user_text(self, make_config, make_app, messages):
        upstream = _ok()
        app = make_app(make_config(), dashscope=upstream)

        response = _post(app, {"messages": messages})

        assert response.status_code == 200
        assert upstream.last_json()["input"]["prompt"] == "你好"

    def test_same_request_twice_gives_same_answer(self, make_config, make_app):
        upstream = _ok("stable")
        app = make_app(make_config(), dashscope=upstream)
        body = {"messages": [{"role": "user", "content": "hi"}]}

        with TestClient(app) as client:
            first = client.post("/api/dashscope", json=body)
            second = client.post("/api/dashscope", json=body)

        assert first.json() == second.json() == {"content": "stable"}


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestCompletionErrors:
    def test_invalid_body_is_rejected_without_upstream_call(self, make_config, make_app):
        upstream = _ok()
        app = make_app(make_config(), dashscope=upstream)

        response = _post(app, {"messages": None})

        assert response.status_code == 400
        assert response.json() == {"error": "Messages are required"}
        assert upstream.call_count == 0

    def test_upstream_status_and_details_are_passed_through(self, make_config, make_app):
        upstream = RecordingTransport(
            lambda request: httpx.Response(
                401,
                text='{"code":"InvalidApiKey"}',
                headers={"x-request-id": "req-9"},
            )
        )
        app = make_app(make_config(), dashscope=upstream)

        response = _post(app, {"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 401
        assert response.json() == {
            "error": "Failed to get response from DashScope",
            "status": 401,
            "request_id": "req-9",
            "details": '{"code":"InvalidApiKey"}',
        }

    def test_missing_output_text(self, make_config, make_app):
        upstream = RecordingTransport(
            lambda request: httpx.Response(200, json={"output": {}, "request_id": "r-2"})
        )
        app = make_app(make_config(), dashscope=upstream)

        response = _post(app, {"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "No text output from DashScope"
        assert body["response"]["request_id"] == "r-2"

    @pytest.mark.parametrize(
        "payload",
        [
            {"output": "oops"},
            [1, 2],
            {"output": {"text": 5}, "request_id": "r-3"},
            {"output": {"text": ""}, "usage": {"tokens": 0}},
        ],
    )
    def test_unexpected_body_shape_is_echoed(self, make_config, make_app, payload):
        upstream = RecordingTransport(lambda request: httpx.Response(200, json=payload))
        app = make_app(make_config(), dashscope=upstream)

        response = _post(app, {"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        assert response.json() == {
            "error": "No text output from DashScope",
            "response": payload,
        }

    def test_timeout_cancels_inflight_call(self, make_config, make_app):
        cancelled: list[bool] = []

        async def hang(request: httpx.Request) -> httpx.Response:
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise
            return httpx.Response(200, json={"output": {"text": "late"}})

        app = make_app(make_config(dashscope_timeout=0.05), dashscope=RecordingTransport(hang))

        start = time.monotonic()
        response = _post(app, {"messages": [{"role": "user", "content": "hi"}]})
        elapsed = time.monotonic() - start

        assert response.status_code == 504
        assert response.json() == {
            "error": "DashScope API request timed out",
            "message": "The API did not respond within 0.05 seconds",
        }
        assert cancelled == [True]
        assert elapsed < 3

    @pytest.mark.parametrize(
        ("overrides", "missing"),
        [
            ({"dashscope_api_key": None}, "DASHSCOPE_API_KEY"),
            ({"dashscope_app_id": None}, "DASHSCOPE_APP_ID"),
        ],
    )
    def test_missing_credentials_fail_without_upstream_call(
        self, make_config, make_app, overrides, missing
    ):
        upstream = _ok()
        app = make_app(make_config(**overrides), dashscope=upstream)

        response = _post(app, {"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        assert missing in response.json()["error"]
        assert upstream.call_count == 0

    def test_transport_failure_is_internal_error(self, make_config, make_app):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        app = make_app(make_config(), dashscope=RecordingTransport(refuse))

        response = _post(app, {"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "message": "connection refused",
        }

    def test_non_json_success_body_is_internal_error(self, make_config, make_app):
        upstream = RecordingTransport(
            lambda request: httpx.Response(200, text="<html>gateway</html>")
        )
        app = make_app(make_config(), dashscope=upstream)

        response = _post(app, {"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
