"""Chat transport.

- Channel / InboundMessage: transport-neutral interface
- TelegramChannel: python-telegram-bot long polling + sendMessage
- ChatDispatcher: per-chat ordered, cross-chat concurrent dispatch
"""

from .base import Channel, InboundMessage
from .dispatcher import ChatDispatcher
from .exceptions import ChannelError
from .telegram import TelegramChannel

__all__ = [
    "Channel",
    "InboundMessage",
    "ChannelError",
    "TelegramChannel",
    "ChatDispatcher",
]
