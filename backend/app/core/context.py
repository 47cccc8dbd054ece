"""Per-request context utilities."""
from __future__ import annotations

from contextvars import ContextVar

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx_var: ContextVar[int | None] = ContextVar("user_id", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


def get_user_id() -> int | None:
    """Return the user the current request acts on, if known."""
    return user_id_ctx_var.get()


def bind_user_id(user_id: int | None) -> None:
    """Attach a user id to log records emitted for the rest of this context."""
    user_id_ctx_var.set(user_id)
