"""Helpers for turning service errors into HTTP responses."""

import uuid
from contextlib import contextmanager
from typing import Optional

import structlog.contextvars
from fastapi import HTTPException

from gateway.models import ErrorResponse


def http_error(
    status_code: int,
    error: str,
    error_code: str,
    trace_id: Optional[str] = None,
) -> HTTPException:
    """Build an HTTPException carrying an ErrorResponse body."""
    exc = HTTPException(
        status_code=status_code,
        detail=ErrorResponse(
            error=error,
            error_code=error_code,
            details={"trace_id": trace_id} if trace_id else None,
        ).model_dump(),
    )
    if trace_id:
        exc.headers = {"X-Trace-Id": trace_id}
    return exc


@contextmanager
def request_trace():
    """
    Bind a fresh trace_id to the log context for one request.

    Yields the trace_id; the context is cleared when the request ends.
    """
    trace_id = str(uuid.uuid4())
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(trace_id=trace_id)
    try:
        yield trace_id
    finally:
        structlog.contextvars.clear_contextvars()
