"""In-memory dialog session store keyed by chat id."""

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, Iterator, Optional

from vacancy_bot.domain.models import DialogSession, DialogState
from vacancy_bot.logging import get_logger

from .locks import KeyedLocks

logger = get_logger(__name__, component="store")


class DialogSessionStore:
    """Volatile per-chat dialog state.

    Sessions are created on demand in state NONE and are never persisted:
    a restart drops every half-finished dialog.
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        self.logger = logger_instance or logger
        self._sessions: Dict[int, DialogSession] = {}
        self._locks = KeyedLocks()

    @contextmanager
    def locked(self, chat_id: int) -> Iterator[None]:
        """Hold the chat's lock across a multi-step read/transition."""
        with self._locks(chat_id):
            yield

    def get(self, chat_id: int) -> DialogSession:
        """Return a copy of the chat's session (NONE if there is none)."""
        with self._locks(chat_id):
            session = self._sessions.get(chat_id)
            if session is None:
                return DialogSession(chat_id=chat_id)
            return replace(session)

    def get_state(self, chat_id: int) -> DialogState:
        return self.get(chat_id).state

    def set_state(
        self, chat_id: int, state: DialogState, temp_data: Optional[str] = None
    ) -> DialogSession:
        """Move the chat to ``state``; NONE destroys the session."""
        with self._locks(chat_id):
            previous = self._sessions.get(chat_id)
            previous_state = previous.state if previous else DialogState.NONE

            if state is DialogState.NONE:
                self._sessions.pop(chat_id, None)
                session = DialogSession(chat_id=chat_id)
            else:
                session = DialogSession(chat_id=chat_id, state=state, temp_data=temp_data)
                self._sessions[chat_id] = session

            if previous_state is not state:
                self.logger.debug(
                    f"Dialog state {previous_state.value} -> {state.value}",
                    extra={
                        "event": "dialog.state.changed",
                        "chat_id": chat_id,
                        "from_state": previous_state.value,
                        "to_state": state.value,
                    },
                )
            return replace(session)

    def reset(self, chat_id: int) -> DialogSession:
        return self.set_state(chat_id, DialogState.NONE)

    def active_count(self) -> int:
        """Number of chats currently mid-dialog."""
        return len(self._sessions)
