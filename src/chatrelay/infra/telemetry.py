"""OpenTelemetry bootstrap: tracing initialisation and span names.

Configures a ``TracerProvider`` with an OTLP HTTP exporter when tracing is
enabled via ``TracingConfig``.  When disabled the module is a graceful no-op
and ``tracer`` hands out non-recording spans.

Auto-instrumentations wired here:

- **FastAPI** (inbound HTTP spans)
- **httpx** (outbound spans for both upstream providers)

Usage::

    from chatrelay.infra.telemetry import SPAN_RELAY_STREAM, tracer

    with tracer.start_as_current_span(SPAN_RELAY_STREAM) as span:
        ...
"""

from __future__ import annotations

import base64
import logging

from opentelemetry import trace

from chatrelay.configs.system import TracingConfig

logger = logging.getLogger(__name__)

tracer = trace.get_tracer("chatrelay")

# ---------------------------------------------------------------------------
# Span names
# ---------------------------------------------------------------------------

SPAN_RELAY_STREAM = "relay.stream"
SPAN_UPSTREAM_DEEPSEEK = "upstream.deepseek"
SPAN_UPSTREAM_DASHSCOPE = "upstream.dashscope"

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_PROVIDER = "relay.provider"
ATTR_RELAY_OUTCOME = "relay.outcome"
ATTR_RELAY_FRAGMENTS = "relay.fragments"
ATTR_RELAY_SKIPPED = "relay.skipped_frames"
ATTR_UPSTREAM_STATUS = "upstream.status_code"
ATTR_UPSTREAM_MESSAGES = "upstream.message_count"
ATTR_UPSTREAM_PROMPT_LEN = "upstream.prompt_len"


_installed_provider: object | None = None


def _collector_headers(settings: TracingConfig) -> dict[str, str]:
    password = settings.password.get_secret_value()
    if not (settings.username and password):
        return {}
    token = base64.b64encode(f"{settings.username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def _install_provider(settings: TracingConfig) -> None:
    """Set the global ``TracerProvider`` once per process."""
    global _installed_provider  # noqa: PLW0603

    if _installed_provider is not None:
        return

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    provider = TracerProvider(
        resource=Resource.create({"service.name": settings.service_name}),
        sampler=ParentBased(root=TraceIdRatioBased(settings.sample_rate)),
    )
    exporter = OTLPSpanExporter(
        endpoint=settings.endpoint, headers=_collector_headers(settings)
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    # Outbound calls to both providers share one pool; instrument httpx globally.
    HTTPXClientInstrumentor().instrument()
    _installed_provider = provider


def init_telemetry(app: object | None = None, settings: TracingConfig | None = None) -> bool:
    """Export spans over OTLP/HTTP and instrument *app* plus outbound httpx.

    Returns ``True`` when tracing is on.  With tracing disabled, or no
    collector endpoint, ``tracer`` keeps handing out non-recording spans
    and the relay code runs unchanged.
    """
    if settings is None or not settings.enabled:
        logger.info("OpenTelemetry tracing disabled.")
        return False
    if not settings.endpoint:
        logger.warning("Tracing enabled without tracing.endpoint; spans are not exported.")
        return False

    _install_provider(settings)

    if app is not None:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(
            app, excluded_urls=",".join(settings.excluded_urls)
        )

    logger.info(
        "OpenTelemetry tracing initialised (service=%s, endpoint=%s).",
        settings.service_name,
        settings.endpoint,
    )
    return True
