"""Request ID logging context for tracing one booking request across modules.

Attaches a request ID to every log record so a single caller's
lookup -> conflict check -> create sequence can be followed in the logs,
even when several requests are awaited concurrently.

Usage:
    from shop_connector.logging_context import get_request_logger, set_request_id

    set_request_id(new_request_id())
    logger = get_request_logger(__name__)
    logger.info("Checking availability")  # → [REQ-1a2b3c4d] Checking availability
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

DEFAULT_REQUEST_ID = "NO_REQUEST_ID"

_request_id: ContextVar[str] = ContextVar("request_id", default=DEFAULT_REQUEST_ID)


def new_request_id() -> str:
    """Generate a short, log-friendly request ID."""
    return f"REQ-{uuid.uuid4().hex[:8]}"


def set_request_id(request_id: str) -> None:
    """Set the request ID for the current async context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    """Retrieve the current request ID."""
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger


def install_request_id_filter() -> None:
    """Attach the filter to every root handler so plain module loggers work too."""
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())


@contextmanager
def request_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """Bind a request ID for the duration of one operation.

    An ID already bound by the caller is kept, so a host that tags its own
    requests sees the same ID in the connector's logs.
    """
    if request_id is None and _request_id.get() != DEFAULT_REQUEST_ID:
        yield _request_id.get()
        return
    token = _request_id.set(request_id or new_request_id())
    try:
        yield _request_id.get()
    finally:
        _request_id.reset(token)
