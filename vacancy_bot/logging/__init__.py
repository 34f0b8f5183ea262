"""Structured logging helpers for the vacancy bot."""

import logging
from typing import Optional


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges a fixed ``component`` field with per-call extras."""

    def process(self, msg, kwargs):
        extra = kwargs.get("extra", {})
        # Per-call fields win over the adapter's defaults
        kwargs["extra"] = {**self.extra, **extra}
        return msg, kwargs


def get_logger(name: str, component: Optional[str] = None):
    """Return a logger, optionally tagging every record with ``component``.

    Args:
        name: Logger name (typically __name__)
        component: Component label injected into all records (dialog, pipeline, ...)

    Returns:
        Logger or ComponentLoggerAdapter instance

    Example:
        >>> logger = get_logger(__name__, component="dialog")
        >>> logger.info("Command received", extra={"event": "dialog.command.received"})
    """
    logger = logging.getLogger(name)

    if component:
        return ComponentLoggerAdapter(logger, {"component": component})

    return logger
