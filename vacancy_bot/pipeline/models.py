"""Data models for search run tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from vacancy_bot.domain.models import Posting


@dataclass
class SourceRunStats:
    """
    Statistics for one source within a search run.

    Attributes:
        source: Source tag value
        requests: Keyword requests issued to the source
        fetched_count: Raw records returned across all keywords
        normalized_count: Records normalized into postings
        error_count: Failed requests plus records that could not be normalized
        skipped: True when the source has no client and was not queried
        error_message: Last error seen for this source, if any
    """

    source: str
    requests: int = 0
    fetched_count: int = 0
    normalized_count: int = 0
    error_count: int = 0
    skipped: bool = False
    error_message: Optional[str] = None

    @property
    def had_errors(self) -> bool:
        return self.error_count > 0


@dataclass
class SearchRunResult:
    """
    Outcome of one search for one chat.

    Attributes:
        chat_id: Chat whose filter drove the search
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        postings: Matching postings, sorted and cut to the result limit
        total_fetched: Raw records fetched across sources
        total_unique: Postings left after de-duplication by id
        total_matched: Postings that passed the filter, before the limit
        source_stats: Per-source statistics
    """

    chat_id: int
    run_started_at: datetime
    run_finished_at: datetime
    postings: List[Posting] = field(default_factory=list)
    total_fetched: int = 0
    total_unique: int = 0
    total_matched: int = 0
    source_stats: List[SourceRunStats] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        return (self.run_finished_at - self.run_started_at).total_seconds()

    @property
    def had_errors(self) -> bool:
        return any(s.had_errors for s in self.source_stats)

    @property
    def truncated(self) -> bool:
        return self.total_matched > len(self.postings)
