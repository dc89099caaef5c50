"""Prometheus metrics for the relay.

All metrics use the ``chatrelay_`` prefix and are exposed on ``/metrics``.
"""

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# Relay session metrics
# ---------------------------------------------------------------------------

RELAY_SESSIONS_ACTIVE = Gauge(
    "chatrelay_relay_sessions_active",
    "Number of streaming relay sessions currently in progress",
    ["provider"],
)

RELAY_SESSIONS_TOTAL = Counter(
    "chatrelay_relay_sessions_total",
    "Total number of streaming relay sessions",
    ["provider", "status"],  # "ok" | "incomplete" | "error" | "cancelled"
)

RELAY_SESSION_DURATION_SECONDS = Histogram(
    "chatrelay_relay_session_duration_seconds",
    "End-to-end duration of a streaming relay session",
    ["provider"],
    buckets=(0.5, 1, 2, 5, 10, 30, 60, 120, 300, 600),
)

# ---------------------------------------------------------------------------
# Stream event metrics
# ---------------------------------------------------------------------------

RELAY_EVENTS_TOTAL = Counter(
    "chatrelay_relay_events_total",
    "Total relay events emitted, by event type",
    ["provider", "event_type"],  # content | done
)

RELAY_SKIPPED_FRAMES_TOTAL = Counter(
    "chatrelay_relay_skipped_frames_total",
    "Upstream SSE frames dropped because they failed to parse",
    ["provider"],
)

# ---------------------------------------------------------------------------
# Upstream call metrics
# ---------------------------------------------------------------------------

UPSTREAM_REQUESTS_TOTAL = Counter(
    "chatrelay_upstream_requests_total",
    "Total upstream provider calls, by outcome",
    ["provider", "outcome"],  # "ok" | "http_error" | "timeout" | "error"
)

UPSTREAM_LATENCY_SECONDS = Histogram(
    "chatrelay_upstream_latency_seconds",
    "Time until upstream response headers (streaming) or body (single-shot)",
    ["provider"],
    buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
)

