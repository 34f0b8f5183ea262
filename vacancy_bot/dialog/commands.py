"""Chat command vocabulary.

Commands are recognised through a lookup table of tokens: slash commands and
plain-text aliases, matched case-insensitively against the trimmed message.
Commands that take a value accept it after the token (``/set_city Казань``).
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class Command(str, Enum):
    HELP = "help"
    FILTERS = "filters"
    SEARCH = "search"
    SET_MIN_SALARY = "set_min_salary"
    SET_MAX_SALARY = "set_max_salary"
    SET_CITY = "set_city"
    ADD_KEYWORD = "add_keyword"
    REMOVE_KEYWORD = "remove_keyword"
    CLEAR_KEYWORDS = "clear_keywords"
    EXPERIENCE = "experience"
    REMOTE = "remote"
    AGENCIES = "agencies"
    SOURCES = "sources"
    TOGGLE_SOURCE = "source"
    CURRENCY = "currency"
    RESET = "reset"
    CANCEL = "cancel"


COMMAND_TOKENS: Dict[str, Command] = {
    "/start": Command.HELP,
    "/help": Command.HELP,
    "помощь": Command.HELP,
    "/filters": Command.FILTERS,
    "фильтры": Command.FILTERS,
    "/search": Command.SEARCH,
    "поиск": Command.SEARCH,
    "/set_min_salary": Command.SET_MIN_SALARY,
    "set min salary": Command.SET_MIN_SALARY,
    "мин зарплата": Command.SET_MIN_SALARY,
    "/set_max_salary": Command.SET_MAX_SALARY,
    "set max salary": Command.SET_MAX_SALARY,
    "макс зарплата": Command.SET_MAX_SALARY,
    "/set_city": Command.SET_CITY,
    "set city": Command.SET_CITY,
    "город": Command.SET_CITY,
    "/add_keyword": Command.ADD_KEYWORD,
    "add keyword": Command.ADD_KEYWORD,
    "ключевое слово": Command.ADD_KEYWORD,
    "/remove_keyword": Command.REMOVE_KEYWORD,
    "/clear_keywords": Command.CLEAR_KEYWORDS,
    "/experience": Command.EXPERIENCE,
    "/remote": Command.REMOTE,
    "/agencies": Command.AGENCIES,
    "/sources": Command.SOURCES,
    "источники": Command.SOURCES,
    "/source": Command.TOGGLE_SOURCE,
    "/currency": Command.CURRENCY,
    "валюта": Command.CURRENCY,
    "/reset": Command.RESET,
    "/cancel": Command.CANCEL,
    "отмена": Command.CANCEL,
}

# Commands that may carry a value after the token
ARGUMENT_COMMANDS = frozenset(
    {
        Command.SET_MIN_SALARY,
        Command.SET_MAX_SALARY,
        Command.SET_CITY,
        Command.ADD_KEYWORD,
        Command.REMOVE_KEYWORD,
        Command.EXPERIENCE,
        Command.SOURCES,
        Command.TOGGLE_SOURCE,
        Command.CURRENCY,
    }
)

# Longest tokens first so "set min salary" wins over any shorter prefix
_TOKENS_BY_LENGTH = sorted(COMMAND_TOKENS, key=len, reverse=True)

# Telegram appends the bot name in group chats: /search@vacancy_bot
_BOT_MENTION = re.compile(r"^(/\w+)@\w+")


@dataclass(frozen=True)
class ParsedCommand:
    command: Command
    argument: Optional[str] = None


def parse_command(text: Optional[str]) -> Optional[ParsedCommand]:
    """Recognise a command in ``text``.

    Returns:
        ParsedCommand, or None if the text is not a known command. A known
        token followed by extra text only counts for commands that take a value.
    """
    if not text:
        return None

    normalized = _BOT_MENTION.sub(r"\1", text.strip())
    lowered = normalized.lower()

    command = COMMAND_TOKENS.get(lowered)
    if command is not None:
        return ParsedCommand(command)

    for token in _TOKENS_BY_LENGTH:
        if not lowered.startswith(token):
            continue
        rest = normalized[len(token):]
        if not rest[:1].isspace():
            continue
        command = COMMAND_TOKENS[token]
        if command not in ARGUMENT_COMMANDS:
            return None
        return ParsedCommand(command, rest.strip())

    return None
