"""Per-chat dialog state machine.

In state NONE a message is interpreted as a command. A command that needs a
value moves the chat to the matching AWAITING_* state, and the next message is
taken as that value. Whatever that message contains, the chat is back in NONE
afterwards: a bad value produces an error reply and leaves the filter alone.
"cancel" is honoured from every state and never touches the filter.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from vacancy_bot.domain.models import DialogState, Filter, Source
from vacancy_bot.formatting.renderer import MessageRenderer
from vacancy_bot.logging import get_logger
from vacancy_bot.pipeline.models import SearchRunResult
from vacancy_bot.store.filter_store import FilterStore
from vacancy_bot.store.session_store import DialogSessionStore

from . import messages
from .commands import Command, ParsedCommand, parse_command
from .validation import (
    parse_amount,
    parse_currency,
    parse_keyword,
    parse_sources,
    parse_years,
)

logger = get_logger(__name__, component="dialog")

SearchFunction = Callable[[Filter], SearchRunResult]

AWAITING_STATES: Dict[Command, DialogState] = {
    Command.SET_MIN_SALARY: DialogState.AWAITING_MIN_SALARY,
    Command.SET_MAX_SALARY: DialogState.AWAITING_MAX_SALARY,
    Command.SET_CITY: DialogState.AWAITING_CITY,
    Command.ADD_KEYWORD: DialogState.AWAITING_KEYWORD,
}

PROMPTS: Dict[DialogState, str] = {
    DialogState.AWAITING_MIN_SALARY: messages.PROMPT_MIN_SALARY,
    DialogState.AWAITING_MAX_SALARY: messages.PROMPT_MAX_SALARY,
    DialogState.AWAITING_CITY: messages.PROMPT_CITY,
    DialogState.AWAITING_KEYWORD: messages.PROMPT_KEYWORD,
}


class DialogEngine:
    """Turns one inbound chat message into filter changes and reply texts."""

    def __init__(
        self,
        filter_store: FilterStore,
        session_store: DialogSessionStore,
        search: SearchFunction,
        renderer: Optional[MessageRenderer] = None,
        available_sources: Sequence[Source] = tuple(Source),
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize DialogEngine.

        Args:
            filter_store: Store of user filters
            session_store: Store of dialog sessions
            search: Callable running a search for a filter (SearchPipeline.run)
            renderer: Message renderer
            available_sources: Sources listed in the help text
            logger_instance: Logger instance (defaults to module logger)
        """
        self.filters = filter_store
        self.sessions = session_store
        self.search = search
        self.renderer = renderer or MessageRenderer()
        self.available_sources = list(available_sources)
        self.logger = logger_instance or logger

        self._field_handlers = {
            DialogState.AWAITING_MIN_SALARY: self._apply_min_salary,
            DialogState.AWAITING_MAX_SALARY: self._apply_max_salary,
            DialogState.AWAITING_CITY: self._apply_city,
            DialogState.AWAITING_KEYWORD: self._apply_keyword,
        }
        self._command_handlers = {
            Command.HELP: self._help,
            Command.FILTERS: self._show_filters,
            Command.SEARCH: self._search,
            Command.REMOVE_KEYWORD: self._remove_keyword,
            Command.CLEAR_KEYWORDS: self._clear_keywords,
            Command.EXPERIENCE: self._set_experience,
            Command.REMOTE: self._toggle_remote,
            Command.AGENCIES: self._toggle_agencies,
            Command.SOURCES: self._set_sources,
            Command.TOGGLE_SOURCE: self._toggle_source,
            Command.CURRENCY: self._set_currency,
            Command.RESET: self._reset,
        }

    def handle(self, chat_id: int, text: Optional[str]) -> List[str]:
        """Process one message and return the replies to send, in order."""
        text = (text or "").strip()

        with self.sessions.locked(chat_id):
            state = self.sessions.get_state(chat_id)
            parsed = parse_command(text)

            if parsed is not None and parsed.command is Command.CANCEL:
                return self._cancel(chat_id, state)

            if state is not DialogState.NONE:
                # Leave the awaiting state before touching the filter so a
                # failure below still ends the dialog
                self.sessions.reset(chat_id)
                self.logger.debug(
                    f"Field value received for {state.value}",
                    extra={"event": "dialog.field.received", "chat_id": chat_id, "state": state.value},
                )
                return self._field_handlers[state](chat_id, text)

            if parsed is None:
                self.logger.debug(
                    "Unrecognized message",
                    extra={"event": "dialog.command.unknown", "chat_id": chat_id},
                )
                return [messages.UNKNOWN_COMMAND]

            self.logger.info(
                f"Command received: {parsed.command.value}",
                extra={
                    "event": "dialog.command.received",
                    "chat_id": chat_id,
                    "command": parsed.command.value,
                    "has_argument": parsed.argument is not None,
                },
            )
            return self._dispatch(chat_id, parsed)

    def _dispatch(self, chat_id: int, parsed: ParsedCommand) -> List[str]:
        awaiting = AWAITING_STATES.get(parsed.command)
        if awaiting is not None:
            if parsed.argument:
                return self._field_handlers[awaiting](chat_id, parsed.argument)
            self.sessions.set_state(chat_id, awaiting)
            return [PROMPTS[awaiting]]

        return self._command_handlers[parsed.command](chat_id, parsed.argument)

    def _cancel(self, chat_id: int, state: DialogState) -> List[str]:
        self.sessions.reset(chat_id)
        if state is DialogState.NONE:
            return [messages.NOTHING_TO_CANCEL]
        self.logger.info(
            "Dialog cancelled",
            extra={"event": "dialog.cancelled", "chat_id": chat_id, "state": state.value},
        )
        return [messages.CANCELLED]

    # ------------------------------------------------------------------
    # Field values
    # ------------------------------------------------------------------

    def _apply_min_salary(self, chat_id: int, text: str) -> List[str]:
        amount = parse_amount(text)
        if not amount.ok:
            self._log_rejected(chat_id, "min_salary", amount.diagnostic)
            return [messages.INVALID_SALARY]
        updated = self.filters.update_min_salary(chat_id, amount.value)
        return self._confirm(messages.SALARY_MIN_UPDATED, updated)

    def _apply_max_salary(self, chat_id: int, text: str) -> List[str]:
        amount = parse_amount(text)
        if not amount.ok:
            self._log_rejected(chat_id, "max_salary", amount.diagnostic)
            return [messages.INVALID_SALARY]
        updated = self.filters.update_max_salary(chat_id, amount.value)
        return self._confirm(messages.SALARY_MAX_UPDATED, updated)

    def _apply_city(self, chat_id: int, text: str) -> List[str]:
        updated = self.filters.update_city(chat_id, text)
        return self._confirm(messages.CITY_UPDATED if updated.city else messages.CITY_CLEARED, updated)

    def _apply_keyword(self, chat_id: int, text: str) -> List[str]:
        keyword = parse_keyword(text)
        if not keyword.ok:
            self._log_rejected(chat_id, "keyword", keyword.diagnostic)
            return [messages.INVALID_KEYWORD]
        updated = self.filters.add_keyword(chat_id, keyword.value)
        return self._confirm(messages.KEYWORD_ADDED, updated)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _help(self, chat_id: int, argument: Optional[str]) -> List[str]:
        return [self.renderer.render_help(self.available_sources)]

    def _show_filters(self, chat_id: int, argument: Optional[str]) -> List[str]:
        return [self.renderer.render_filters(self.filters.get(chat_id))]

    def _search(self, chat_id: int, argument: Optional[str]) -> List[str]:
        result = self.search(self.filters.get(chat_id))
        return self.renderer.render_results(result)

    def _remove_keyword(self, chat_id: int, argument: Optional[str]) -> List[str]:
        keyword = parse_keyword(argument)
        if not keyword.ok:
            return [messages.REMOVE_KEYWORD_USAGE]
        updated = self.filters.remove_keyword(chat_id, keyword.value)
        return self._confirm(messages.KEYWORD_REMOVED, updated)

    def _clear_keywords(self, chat_id: int, argument: Optional[str]) -> List[str]:
        return self._confirm(messages.KEYWORDS_CLEARED, self.filters.clear_keywords(chat_id))

    def _set_experience(self, chat_id: int, argument: Optional[str]) -> List[str]:
        years = parse_years(argument)
        if not years.ok:
            self._log_rejected(chat_id, "min_experience_years", years.diagnostic)
            return [messages.INVALID_EXPERIENCE]
        updated = self.filters.set_min_experience(chat_id, years.value)
        return self._confirm(messages.EXPERIENCE_UPDATED, updated)

    def _toggle_remote(self, chat_id: int, argument: Optional[str]) -> List[str]:
        updated = self.filters.toggle_remote_only(chat_id)
        return self._confirm(messages.REMOTE_ON if updated.remote_only else messages.REMOTE_OFF, updated)

    def _toggle_agencies(self, chat_id: int, argument: Optional[str]) -> List[str]:
        updated = self.filters.toggle_exclude_agencies(chat_id)
        return self._confirm(
            messages.AGENCIES_ON if updated.exclude_agencies else messages.AGENCIES_OFF, updated
        )

    def _set_sources(self, chat_id: int, argument: Optional[str]) -> List[str]:
        sources = parse_sources(argument)
        if not sources.ok:
            self._log_rejected(chat_id, "sources", sources.diagnostic)
            return [messages.SOURCES_USAGE]
        updated = self.filters.set_sources(chat_id, sources.value)
        return self._confirm(messages.SOURCES_UPDATED, updated)

    def _toggle_source(self, chat_id: int, argument: Optional[str]) -> List[str]:
        sources = parse_sources(argument)
        if not sources.ok or len(sources.value) != 1:
            self._log_rejected(chat_id, "sources", sources.diagnostic or "more than one source")
            return [messages.SOURCE_USAGE]
        updated = self.filters.toggle_source(chat_id, sources.value[0])
        return self._confirm(messages.SOURCES_UPDATED, updated)

    def _set_currency(self, chat_id: int, argument: Optional[str]) -> List[str]:
        currency = parse_currency(argument)
        if not currency.ok:
            self._log_rejected(chat_id, "salary_currency", currency.diagnostic)
            return [messages.INVALID_CURRENCY]
        updated = self.filters.set_salary_currency(chat_id, currency.value)
        return self._confirm(messages.CURRENCY_UPDATED, updated)

    def _reset(self, chat_id: int, argument: Optional[str]) -> List[str]:
        return self._confirm(messages.FILTERS_RESET, self.filters.reset(chat_id))

    # ------------------------------------------------------------------

    def _confirm(self, notice: str, filter_: Filter) -> List[str]:
        return [f"{notice}\n\n{self.renderer.render_filters(filter_)}"]

    def _log_rejected(self, chat_id: int, field: str, diagnostic: Optional[str]) -> None:
        self.logger.info(
            f"Rejected value for {field}",
            extra={
                "event": "dialog.field.rejected",
                "chat_id": chat_id,
                "field": field,
                "reason": diagnostic,
            },
        )
