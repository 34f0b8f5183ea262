"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check raw configuration for settings that are valid but probably unwise.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    search = config_dict.get("search", {})
    if isinstance(search, dict):
        delay = search.get("request_delay_ms", 300)
        if isinstance(delay, int) and 0 <= delay < 300:
            warning_messages.append(
                f"request_delay_ms={delay} is below 300ms and may trigger source rate limits"
            )

        max_results = search.get("max_results", 10)
        if isinstance(max_results, int) and max_results > 20:
            warning_messages.append(
                f"max_results={max_results} sends one chat message per posting and may flood users"
            )

    sources = config_dict.get("sources", {})
    if isinstance(sources, dict):
        enabled = sources.get("enabled")
        if isinstance(enabled, list) and not enabled:
            warning_messages.append("No sources are enabled; every search will return nothing")

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message through the warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
