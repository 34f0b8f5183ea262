"""Exceptions raised while rendering chat messages."""


class FormattingError(Exception):
    """A message template could not be loaded or rendered."""

    pass
