"""SSE relay wrapper for the streaming endpoint.

Wraps the open upstream response in a caller-facing SSE byte-stream
with tracing, metrics, and guaranteed release of the upstream
connection.  Parsing lives in ``chatrelay.core.relay``; this module
handles the lifecycle around it.

Once the response headers are sent an error can no longer become a
JSON body, so upstream read failures are logged and re-raised, which
aborts the HTTP response.
"""

import asyncio
import json
import logging
import time
from collections import Counter as EventCounter
from collections.abc import AsyncGenerator

import anyio
import httpx

from chatrelay.core.metrics import (
    RELAY_EVENTS_TOTAL,
    RELAY_SESSION_DURATION_SECONDS,
    RELAY_SESSIONS_ACTIVE,
    RELAY_SESSIONS_TOTAL,
    RELAY_SKIPPED_FRAMES_TOTAL,
)
from chatrelay.core.models import StreamDone
from chatrelay.core.relay import format_sse, relay_fragments
from chatrelay.infra.telemetry import (
    ATTR_PROVIDER,
    ATTR_RELAY_FRAGMENTS,
    ATTR_RELAY_OUTCOME,
    ATTR_RELAY_SKIPPED,
    SPAN_RELAY_STREAM,
    tracer,
)

logger = logging.getLogger(__name__)

EVENT_TYPE_CONTENT = "content"
EVENT_TYPE_DONE = "done"


async def sse_relay(
    response: httpx.Response,
    *,
    provider: str = "",
) -> AsyncGenerator[str, None]:
    """Relay *response*'s SSE body as caller-facing SSE frames.

    Parameters
    ----------
    response:
        Open upstream response with an unread streaming body.
    provider:
        Provider label for metrics and the trace span.

    Yields
    ------
    SSE-formatted strings (``data: {...}\\n\\n``).
    """
    with tracer.start_as_current_span(SPAN_RELAY_STREAM) as span:
        span.set_attribute(ATTR_PROVIDER, provider)
        outcome = "incomplete"
        event_counts: EventCounter[str] = EventCounter()
        RELAY_SESSIONS_ACTIVE.labels(provider=provider).inc()
        start = time.monotonic()

        def on_skip(_payload: str) -> None:
            event_counts["skipped"] += 1
            RELAY_SKIPPED_FRAMES_TOTAL.labels(provider=provider).inc()

        try:
            async for event in relay_fragments(response.aiter_lines(), on_skip=on_skip):
                if isinstance(event, StreamDone):
                    event_type = EVENT_TYPE_DONE
                    outcome = "ok"
                else:
                    event_type = EVENT_TYPE_CONTENT
                event_counts[event_type] += 1
                RELAY_EVENTS_TOTAL.labels(provider=provider, event_type=event_type).inc()
                yield format_sse(event)

        except asyncio.CancelledError:
            outcome = "cancelled"
            logger.debug("Caller disconnected; releasing upstream stream.")
            raise
        except Exception as e:
            outcome = "error"
            span.record_exception(e)
            logger.error("Stream error: %s", e, exc_info=True)
            raise
        finally:
            with anyio.CancelScope(shield=True):
                await response.aclose()
            span.set_attribute(ATTR_RELAY_OUTCOME, outcome)
            span.set_attribute(ATTR_RELAY_FRAGMENTS, event_counts[EVENT_TYPE_CONTENT])
            span.set_attribute(ATTR_RELAY_SKIPPED, event_counts["skipped"])
            RELAY_SESSIONS_ACTIVE.labels(provider=provider).dec()
            RELAY_SESSIONS_TOTAL.labels(provider=provider, status=outcome).inc()
            RELAY_SESSION_DURATION_SECONDS.labels(provider=provider).observe(
                time.monotonic() - start
            )
            logger.debug("Relay finished (%s): %s", outcome, json.dumps(event_counts))
