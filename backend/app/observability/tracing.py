"""Tracing utilities wrapping Opik."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from app.observability import client as opik_client

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from opik.api_objects.trace.trace_client import Trace

logger = logging.getLogger(__name__)


def get_opik_client():
    return opik_client.get_opik_client()


def start_trace(name: str, metadata: Optional[Dict[str, Any]] = None) -> Optional["Trace"]:
    """Open a trace on the active client, or return None when tracing is off."""
    client = get_opik_client()
    if not client:
        return None
    try:
        return client.trace(name=name, metadata=metadata or None)
    except Exception as exc:  # pragma: no cover - remote failure
        logger.debug("Unable to start Opik trace %s: %s", name, exc)
        return None


def end_trace(opik_trace: Optional["Trace"], name: str) -> None:
    if not opik_trace:
        return
    try:
        opik_trace.end()
    except Exception:  # pragma: no cover - remote failure
        logger.debug("Failed to close Opik trace %s cleanly", name, exc_info=True)


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    user_id: Optional[int | str] = None,
    request_id: Optional[str] = None,
) -> Iterator[Optional["Trace"]]:
    """
    Create an Opik trace context manager.

    Yields None when Opik is disabled so callers can guard `.update(...)` calls.
    Exceptions raised inside the block are attached to the trace and re-raised.
    """
    trace_metadata = {key: value for key, value in (metadata or {}).items() if value is not None}
    if user_id is not None:
        trace_metadata.setdefault("user_id", str(user_id))
    if request_id:
        trace_metadata.setdefault("request_id", request_id)
    opik_trace = start_trace(name, trace_metadata)

    try:
        yield opik_trace
    except Exception as exc:
        if opik_trace:
            try:
                opik_trace.update(error_info={"message": str(exc)})
            except Exception:  # pragma: no cover
                logger.debug("Failed to attach error info to Opik trace %s", name, exc_info=True)
        raise
    finally:
        end_trace(opik_trace, name)
