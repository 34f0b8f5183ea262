"""Exceptions raised by chat transports."""


class ChannelError(Exception):
    """Receiving updates from the chat transport failed."""

    pass
