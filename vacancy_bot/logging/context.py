"""Scoped logging context.

Fields pushed here (chat_id, source, keyword, ...) are merged into every log
record emitted while the scope is active. Backed by contextvars, so each worker
thread handling a chat sees only its own fields.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional


LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the active logging context."""
    return LogContextVar.get().copy()


def push_log_context(**kwargs) -> Token:
    """Merge fields into the logging context.

    Returns:
        Token to pass to pop_log_context() to restore the previous state
    """
    current = LogContextVar.get()
    return LogContextVar.set({**current, **kwargs})


def pop_log_context(token: Token) -> None:
    """Restore the logging context captured by push_log_context()."""
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Drop all context fields (used by tests)."""
    LogContextVar.set({})


class log_context:
    """Context manager pushing fields on entry and restoring them on exit.

    Example:
        >>> with log_context(chat_id=42):
        ...     logger.info("Handling message")  # record carries chat_id=42
    """

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
        return False
