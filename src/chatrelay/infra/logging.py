"""Root logger setup for the relay process.

One stdout handler serves the root logger and uvicorn's loggers.  Records
are rendered as JSON lines for log shippers, or as coloured text when
``json_output`` is off.  Every record carries ``service`` plus the active
OpenTelemetry ``trace_id``/``span_id`` (empty strings outside a span), so
a relay session's upstream error and its skipped frames can be joined on
the trace id.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import trace

from chatrelay.configs.system import LoggingConfig

SERVICE_NAME = "chatrelay"

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s %(service)s %(trace_id)s %(span_id)s"
_JSON_RENAMES = {"asctime": "timestamp", "levelname": "level", "name": "logger"}
_TEXT_FORMAT = "%(levelprefix)s %(asctime)s %(name)s [%(trace_id).8s] %(message)s"
_TEXT_DATEFMT = "%H:%M:%S"


class _RelayContextFilter(logging.Filter):
    """Stamps the service name and current trace context onto records."""

    def __init__(self, service: str) -> None:
        super().__init__()
        self._service = service

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = trace.get_current_span().get_span_context()
        record.service = self._service  # type: ignore[attr-defined]
        record.trace_id = format(ctx.trace_id, "032x") if ctx.is_valid else ""  # type: ignore[attr-defined]
        record.span_id = format(ctx.span_id, "016x") if ctx.is_valid else ""  # type: ignore[attr-defined]
        return True


def _build_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.json_output:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt=_JSON_FIELDS,
            rename_fields=_JSON_RENAMES,
            json_ensure_ascii=False,
        )

    from uvicorn.logging import DefaultFormatter

    return DefaultFormatter(fmt=_TEXT_FORMAT, datefmt=_TEXT_DATEFMT, use_colors=True)


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Install the stdout handler on the root and uvicorn loggers.

    Safe to call again (each app built in tests does): the previous
    handler is replaced rather than stacked.
    """
    config = config or LoggingConfig()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_RelayContextFilter(SERVICE_NAME))
    handler.setFormatter(_build_formatter(config))

    root = logging.getLogger()
    root.setLevel(config.level.upper())
    root.handlers = [handler]

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
