"""Per-chat ordered message dispatch over a worker pool.

Messages from different chats are handled concurrently; messages from one chat
are handled one at a time in arrival order. Each chat with pending messages has
a FIFO queue drained by at most one worker.
"""

import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Deque, Dict

from vacancy_bot.logging import get_logger

from .base import InboundMessage

logger = get_logger(__name__, component="dispatcher")


class ChatDispatcher:
    def __init__(self, handler: Callable[[InboundMessage], object], workers: int = 4):
        """
        Args:
            handler: Called once per message on a worker thread
            workers: Maximum number of chats processed concurrently
        """
        self.handler = handler
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="chat-worker")
        self._queues: Dict[int, Deque[InboundMessage]] = {}
        self._lock = threading.Lock()

    def submit(self, message: InboundMessage) -> None:
        """Queue a message; a worker picks the chat up if none is draining it."""
        with self._lock:
            queue = self._queues.get(message.chat_id)
            if queue is not None:
                queue.append(message)
                return
            self._queues[message.chat_id] = deque([message])

        self._executor.submit(self._drain, message.chat_id)

    def pending(self) -> int:
        """Chats with queued or in-flight messages."""
        with self._lock:
            return len(self._queues)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _drain(self, chat_id: int) -> None:
        while True:
            with self._lock:
                queue = self._queues[chat_id]
                if not queue:
                    del self._queues[chat_id]
                    return
                message = queue.popleft()

            try:
                self.handler(message)
            except Exception as e:
                logger.error(
                    f"Unhandled error processing message: {e}",
                    extra={
                        "event": "dispatcher.message.failed",
                        "chat_id": chat_id,
                        "error_type": type(e).__name__,
                    },
                    exc_info=True,
                )
