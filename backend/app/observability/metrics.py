"""Lightweight metrics helpers."""
from __future__ import annotations

from typing import Any, Dict, Optional

from app.observability.tracing import end_trace, start_trace


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record a metric as a short-lived Opik trace; a no-op when Opik is off."""
    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)

    trace_name = f"metric:{name}"
    end_trace(start_trace(trace_name, payload), trace_name)
