"""Top-level message handler tying the dialog engine to a chat channel."""

import logging
from typing import List, Optional

from vacancy_bot.channel.base import Channel, InboundMessage
from vacancy_bot.formatting.renderer import MessageRenderer
from vacancy_bot.logging import get_logger
from vacancy_bot.logging.context import log_context

from .machine import DialogEngine

logger = get_logger(__name__, component="dialog")


class BotService:
    """Handles inbound messages: dialog engine in, replies out.

    This is the outermost boundary for message processing. Any exception from
    the dialog engine is reported to the user as a generic error, logged, and
    the chat's dialog is reset to NONE; it never reaches the channel loop.
    """

    def __init__(
        self,
        engine: DialogEngine,
        channel: Channel,
        renderer: Optional[MessageRenderer] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.engine = engine
        self.channel = channel
        self.renderer = renderer or engine.renderer
        self.logger = logger_instance or logger

    def handle_message(self, message: InboundMessage) -> List[str]:
        """Process one inbound message and send the replies.

        Returns:
            The replies that were handed to the channel
        """
        with log_context(chat_id=message.chat_id):
            try:
                replies = self.engine.handle(message.chat_id, message.text)
            except Exception as e:
                self.logger.error(
                    f"Failed to handle message: {e}",
                    extra={
                        "event": "dialog.message.failed",
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                    exc_info=True,
                )
                self.engine.sessions.reset(message.chat_id)
                replies = [self.renderer.render_error(str(e))]

            for reply in replies:
                self.channel.send_message(message.chat_id, reply)

            self.logger.debug(
                "Message handled",
                extra={"event": "dialog.message.handled", "replies": len(replies)},
            )
            return replies
