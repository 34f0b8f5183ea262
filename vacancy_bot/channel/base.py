"""Chat channel interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class InboundMessage:
    """A text message received from a chat."""

    chat_id: int
    text: str


class Channel(ABC):
    """Outbound side of a chat transport."""

    @abstractmethod
    def send_message(self, chat_id: int, text: str) -> bool:
        """Deliver ``text`` to ``chat_id``.

        Delivery failures are logged by the implementation and reported by
        returning False; they are never raised.
        """
