"""API client for the chatrelay endpoints with SSE stream parsing."""

import json
import logging
from typing import AsyncIterator

import httpx

from .config import CLIConfig

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


def iter_sse_payloads(buffer: str) -> tuple[list[str], str]:
    """Split complete SSE events off *buffer*.

    Returns the ``data:`` payloads of every complete event (terminated by
    a blank line) and the unconsumed remainder.
    """
    payloads: list[str] = []
    buffer = buffer.replace("\r\n", "\n")
    while "\n\n" in buffer:
        event_block, buffer = buffer.split("\n\n", 1)
        for line in event_block.split("\n"):
            if line.startswith("data:"):
                payloads.append(line[5:].removeprefix(" "))
    return payloads, buffer


class ChatAPIClient:
    """Client for interacting with the chatrelay API.

    Every call yields plain event dicts: ``{"type": "content", ...}``,
    ``{"type": "done"}`` or ``{"type": "error", ...}``.
    """

    def __init__(self, config: CLIConfig, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the API client."""
        self.config = config
        self.client = httpx.AsyncClient(timeout=config.timeout, transport=transport)

    async def chat(self, messages: list[dict]) -> AsyncIterator[dict]:
        """Send the conversation and yield events for the assistant reply."""
        url = self.config.chat_url
        payload = {"messages": messages}
        logger.debug("Making request to %s with %d message(s)", url, len(messages))

        try:
            if self.config.mode == "stream":
                async for event in self._stream(url, payload):
                    yield event
            else:
                async for event in self._single(url, payload):
                    yield event

        except httpx.TimeoutException:
            yield {
                "type": "error",
                "message": "Request timed out.",
                "code": "TIMEOUT",
            }
        except httpx.ConnectError as e:
            yield {
                "type": "error",
                "message": f"Connection error: {str(e)}",
                "code": "CONNECTION_ERROR",
            }
        except httpx.HTTPError as e:
            logger.exception("Unexpected error during API request")
            yield {
                "type": "error",
                "message": f"Unexpected error: {str(e)}",
                "code": "UNEXPECTED_ERROR",
            }

    async def _stream(self, url: str, payload: dict) -> AsyncIterator[dict]:
        async with self.client.stream(
            "POST", url, json=payload, headers={"Accept": "text/event-stream"}
        ) as response:
            logger.debug("Response status: %s", response.status_code)

            if response.status_code != 200:
                error_text = await response.aread()
                yield _http_error(response.status_code, error_text.decode(errors="replace"))
                return

            buffer = ""
            async for chunk in response.aiter_text():
                payloads, buffer = iter_sse_payloads(buffer + chunk)
                for data_str in payloads:
                    if data_str == DONE_SENTINEL:
                        yield {"type": "done"}
                        return
                    try:
                        event = json.loads(data_str)
                    except json.JSONDecodeError as e:
                        logger.warning("Failed to parse SSE data: %s, error: %s", data_str, e)
                        continue
                    content = event.get("content") if isinstance(event, dict) else None
                    if content:
                        yield {"type": "content", "content": content}

        logger.warning("Stream ended without %s", DONE_SENTINEL)
        yield {"type": "done"}

    async def _single(self, url: str, payload: dict) -> AsyncIterator[dict]:
        response = await self.client.post(url, json=payload)
        logger.debug("Response status: %s", response.status_code)

        if response.status_code != 200:
            yield _http_error(response.status_code, response.text)
            return

        try:
            body = response.json()
        except ValueError:
            body = None
        content = body.get("content") if isinstance(body, dict) else None
        if not content:
            yield {
                "type": "error",
                "message": "No content in response",
                "code": "EMPTY_RESPONSE",
            }
            return
        yield {"type": "content", "content": content}
        yield {"type": "done"}

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()


def _http_error(status_code: int, text: str) -> dict:
    return {
        "type": "error",
        "message": f"HTTP {status_code}: {text}",
        "code": "HTTP_ERROR",
    }
