"""Telegram channel built on python-telegram-bot.

The library is asyncio-based while the rest of the bot is threaded, so the
channel owns a private event loop running in a daemon thread and submits Bot
calls to it. Only getUpdates (long polling with an offset so every update is
delivered once) and sendMessage are used.
"""

import asyncio
import html
import logging
import re
import threading
from typing import Callable, List, Optional, Tuple

from telegram import Bot, LinkPreviewOptions
from telegram.constants import MessageLimit, ParseMode
from telegram.error import TelegramError
from telegram.request import HTTPXRequest

from vacancy_bot.logging import get_logger

from .base import Channel, InboundMessage
from .exceptions import ChannelError

logger = get_logger(__name__, component="telegram")

MAX_MESSAGE_LENGTH = MessageLimit.MAX_TEXT_LENGTH

_TAG = re.compile(r"<[^>]+>")


class TelegramChannel(Channel):
    """Sends and receives Telegram messages through a python-telegram-bot Bot."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.telegram.org",
        poll_timeout: int = 30,
        parse_mode: Optional[str] = ParseMode.HTML,
        request_timeout: int = 30,
        connection_pool_size: int = 4,
        bot: Optional[Bot] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize TelegramChannel.

        Args:
            token: Bot token from @BotFather
            api_url: Bot API base URL
            poll_timeout: Long-poll timeout passed to getUpdates (seconds)
            parse_mode: parse_mode for sendMessage; None sends plain text
            request_timeout: HTTP timeout for sendMessage, and the margin added
                on top of poll_timeout for getUpdates
            connection_pool_size: Concurrent sendMessage connections
            bot: Pre-built Bot (tests inject mocks here)
            logger_instance: Logger instance (defaults to module logger)
        """
        if not token:
            raise ValueError("token cannot be empty")

        self.poll_timeout = poll_timeout
        self.parse_mode = parse_mode
        self.request_timeout = request_timeout
        self.logger = logger_instance or logger
        self._bot = bot or Bot(
            token=token,
            base_url=f"{api_url.rstrip('/')}/bot",
            request=HTTPXRequest(
                connection_pool_size=connection_pool_size,
                read_timeout=request_timeout,
                write_timeout=request_timeout,
                connect_timeout=request_timeout,
            ),
            get_updates_request=HTTPXRequest(
                read_timeout=request_timeout,
                connect_timeout=request_timeout,
            ),
        )
        self._offset: Optional[int] = None
        self._initialized = False
        self._init_lock = threading.Lock()

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever, name="telegram-loop", daemon=True
        )
        self._thread.start()

    def send_message(self, chat_id: int, text: str) -> bool:
        """Send one message; failures are logged and reported as False."""
        body, parse_mode = self._fit(text)
        try:
            self._ensure_initialized()
            self._call(
                self._bot.send_message(
                    chat_id=chat_id,
                    text=body,
                    parse_mode=parse_mode,
                    link_preview_options=LinkPreviewOptions(is_disabled=True),
                )
            )
        except TelegramError as e:
            self.logger.error(
                f"Failed to send message: {type(e).__name__}",
                extra={
                    "event": "telegram.send.failed",
                    "chat_id": chat_id,
                    "error_type": type(e).__name__,
                    "error": e.message,
                },
            )
            return False

        self.logger.debug(
            "Message sent",
            extra={"event": "telegram.send.succeeded", "chat_id": chat_id, "length": len(body)},
        )
        return True

    def get_updates(self) -> List[InboundMessage]:
        """Long-poll for new updates and return the text messages among them.

        Raises:
            ChannelError: If the request fails or Telegram reports an error
        """
        try:
            self._ensure_initialized()
            updates = self._call(
                self._bot.get_updates(
                    offset=self._offset,
                    timeout=self.poll_timeout,
                    allowed_updates=["message"],
                )
            )
        except TelegramError as e:
            raise ChannelError(f"getUpdates failed: {type(e).__name__}") from e

        messages = []
        for update in updates:
            self._offset = max(self._offset or 0, update.update_id + 1)

            message = update.message
            if message is None or message.text is None:
                continue
            messages.append(InboundMessage(chat_id=message.chat.id, text=message.text))

        if messages:
            self.logger.debug(
                f"Received {len(messages)} messages",
                extra={"event": "telegram.updates.received", "count": len(messages)},
            )
        return messages

    def poll(
        self,
        handler: Callable[[InboundMessage], None],
        stop_event: threading.Event,
        error_backoff: float = 5.0,
    ) -> None:
        """Feed inbound messages to ``handler`` until ``stop_event`` is set.

        Transport errors are logged and retried after ``error_backoff`` seconds.
        """
        self.logger.info(
            "Polling for updates",
            extra={"event": "telegram.polling.started", "poll_timeout": self.poll_timeout},
        )

        while not stop_event.is_set():
            try:
                updates = self.get_updates()
            except ChannelError as e:
                self.logger.warning(
                    f"Polling error: {e}",
                    extra={"event": "telegram.polling.error", "error": str(e)},
                )
                stop_event.wait(error_backoff)
                continue

            for message in updates:
                handler(message)

        self.logger.info("Polling stopped", extra={"event": "telegram.polling.stopped"})

    def close(self) -> None:
        if self._loop.is_closed():
            return
        if self._initialized:
            try:
                self._call(self._bot.shutdown())
            except TelegramError as e:
                self.logger.warning(
                    f"Bot shutdown failed: {type(e).__name__}",
                    extra={"event": "telegram.shutdown.failed", "error_type": type(e).__name__},
                )
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop.close()

    def _fit(self, text: str) -> Tuple[str, Optional[str]]:
        """Return the text to send and its parse mode.

        Over-long markup cannot be cut safely, so it is sent as plain text.
        """
        if len(text) <= MAX_MESSAGE_LENGTH:
            return text, self.parse_mode

        plain = text
        if self.parse_mode == ParseMode.HTML:
            plain = html.unescape(_TAG.sub("", text))
        self.logger.warning(
            "Message too long, sending as plain text",
            extra={"event": "telegram.send.truncated", "length": len(text)},
        )
        return plain[:MAX_MESSAGE_LENGTH], None

    def _ensure_initialized(self) -> None:
        with self._init_lock:
            if not self._initialized:
                self._call(self._bot.initialize())
                self._initialized = True

    def _call(self, coro):
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()
