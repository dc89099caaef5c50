"""Upstream SSE to caller SSE translation.

The upstream body arrives as OpenAI-style ``chat.completion.chunk``
events::

    data: {"choices":[{"delta":{"content":"Hi"}}]}

    data: [DONE]

and is re-emitted as one compact frame per non-empty delta::

    data: {"content":"Hi"}

    data: [DONE]

Line assembly happens upstream of this module: ``relay_fragments``
consumes already-decoded lines (``httpx.Response.aiter_lines`` buffers
partial lines and multi-byte characters across network reads), so an
event split between two reads is still seen whole.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterable, Callable

from pydantic import ValidationError

from chatrelay.core.models import DONE_SENTINEL, RelayEvent, StreamDone, StreamFragment
from chatrelay.core.providers.models import ChatCompletionChunk

logger = logging.getLogger(__name__)

SSE_DATA_FIELD = "data:"
SSE_EVENT_TERMINATOR = "\n\n"


def parse_sse_data(line: str) -> str | None:
    """Return the payload of an SSE ``data:`` line, else ``None``.

    One optional space after the colon is part of the field separator,
    and a trailing ``\\r`` from CRLF framing is dropped.
    """
    line = line.rstrip("\r")
    if not line.startswith(SSE_DATA_FIELD):
        return None
    payload = line[len(SSE_DATA_FIELD) :]
    if payload.startswith(" "):
        payload = payload[1:]
    return payload


def decode_chunk(payload: str) -> StreamFragment | None:
    """Decode one upstream payload into a fragment, or ``None`` if empty.

    Raises:
        ValidationError: the payload is not a valid chunk object.
    """
    chunk = ChatCompletionChunk.model_validate_json(payload)
    content = chunk.delta_content
    if not content:
        return None
    return StreamFragment(content=content)


async def relay_fragments(
    lines: AsyncIterable[str],
    *,
    on_skip: Callable[[str], None] | None = None,
) -> AsyncGenerator[RelayEvent, None]:
    """Yield a ``StreamFragment`` per non-empty delta, then ``StreamDone``.

    Stops reading as soon as the ``[DONE]`` sentinel is seen.  Payloads
    that fail to parse are logged and skipped; *on_skip* is called with
    the offending payload.  If the upstream ends without the sentinel no
    ``StreamDone`` is produced.
    """
    async for line in lines:
        payload = parse_sse_data(line)
        if payload is None:
            continue

        if payload == DONE_SENTINEL:
            yield StreamDone()
            return

        try:
            fragment = decode_chunk(payload)
        except ValidationError:
            logger.warning("Failed to parse chunk: %s", payload)
            if on_skip is not None:
                on_skip(payload)
            continue

        if fragment is not None:
            yield fragment

    logger.warning("Upstream stream ended without %s sentinel", DONE_SENTINEL)


def format_sse(event: RelayEvent) -> str:
    """Serialize a relay event as one caller-facing SSE frame."""
    if isinstance(event, StreamDone):
        return f"data: {DONE_SENTINEL}{SSE_EVENT_TERMINATOR}"
    return f"data: {event.model_dump_json()}{SSE_EVENT_TERMINATOR}"
