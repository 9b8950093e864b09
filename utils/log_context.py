"""
Call-scoped logging context.

Every logical pipeline call gets a short correlation id stored in a
ContextVar, so the renewal sub-request and the retry log under the same id as
the original request. The JSON formatter picks it up automatically.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

call_id_context: ContextVar[str] = ContextVar("call_id", default="")


def get_call_id() -> str:
    """Get the correlation id of the current pipeline call ("" outside one)."""
    return call_id_context.get("")


@contextmanager
def call_scope(call_id: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of a logical call."""
    value = call_id or uuid.uuid4().hex[:12]
    token = call_id_context.set(value)
    try:
        yield value
    finally:
        call_id_context.reset(token)


def get_context_extra(
    method: str | None = None,
    path: str | None = None,
    status: int | None = None,
    **additional: Any,
) -> dict[str, Any]:
    """
    Build a structured logging extra dict for a request.

    Examples:
        logger.info("Request completed", extra=get_context_extra("GET", "/guild", 200))
        logger.info("Action sent", extra=get_context_extra(action="KICK", user_id="u1"))
    """
    extra: dict[str, Any] = {}
    if method is not None:
        extra["method"] = method
    if path is not None:
        extra["path"] = path
    if status is not None:
        extra["status"] = status
    for key, value in additional.items():
        if value is not None:
            extra[key] = value
    return extra
