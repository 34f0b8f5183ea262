"""Domain models for postings, filters and dialog sessions."""

from .models import (
    DEFAULT_CURRENCY,
    DEFAULT_KEYWORDS,
    SOURCE_EMOJI,
    SOURCE_NAMES,
    DialogSession,
    DialogState,
    Filter,
    Posting,
    RawPosting,
    Source,
    source_emoji,
    source_name,
)

__all__ = [
    "DEFAULT_CURRENCY",
    "DEFAULT_KEYWORDS",
    "SOURCE_EMOJI",
    "SOURCE_NAMES",
    "DialogSession",
    "DialogState",
    "Filter",
    "Posting",
    "RawPosting",
    "Source",
    "source_emoji",
    "source_name",
]
