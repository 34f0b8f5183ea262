"""Conversation handling.

- DialogEngine: per-chat state machine collecting filter criteria
- BotService: message boundary (engine + channel + error reply)
- parse_command / Command: command vocabulary
"""

from .commands import COMMAND_TOKENS, Command, ParsedCommand, parse_command
from .machine import DialogEngine
from .service import BotService
from .validation import (
    parse_amount,
    parse_currency,
    parse_keyword,
    parse_sources,
    parse_years,
)

__all__ = [
    "DialogEngine",
    "BotService",
    "Command",
    "ParsedCommand",
    "COMMAND_TOKENS",
    "parse_command",
    "parse_amount",
    "parse_keyword",
    "parse_years",
    "parse_sources",
    "parse_currency",
]
