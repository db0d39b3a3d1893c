"""Structured Logging & Tracing — JSON formatter, setup, and scoped trace spans.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (user_id, transaction_tag, cache_key, ...) surfaced when present
    - JSON format in production, human-readable in development
    - Every span is ended on every exit path; an exception is recorded, then re-raised
    - Inside a request, every record carries that request's request_id

Design Decisions:
    - setup_logging called once on startup via lifespan
    - request_id travels in a ContextVar set by the HTTP middleware; a handler filter
      copies it onto each record, so call sites never pass it
    - Spans go through the opentelemetry API only: without an SDK configured
      the tracer is a no-op, so tests and local runs need nothing extra
"""

import logging
import json
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

_EXTRA_FIELDS = (
    "user_id", "item_id", "transaction_tag", "request_tag", "cache_key",
    "rows_affected", "error_code", "topic", "path", "source",
    "request_id", "method", "status_code", "duration_ms",
)

_tracer = trace.get_tracer("user_items")

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


class RequestContextFilter(logging.Filter):
    """Stamp the current request_id on records that do not carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    handler.addFilter(RequestContextFilter())
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


@contextmanager
def span(name: str, **attributes: str | int | float | bool | None) -> Iterator[Span]:
    """Run a named phase inside a trace span.

    None-valued attributes are dropped (OpenTelemetry rejects them).
    """
    attrs = {k: v for k, v in attributes.items() if v is not None}
    with _tracer.start_as_current_span(
        name, attributes=attrs,
        record_exception=False, set_status_on_exception=False,
    ) as current:
        try:
            yield current
        except BaseException as e:
            current.record_exception(e)
            current.set_status(Status(StatusCode.ERROR, type(e).__name__))
            raise
