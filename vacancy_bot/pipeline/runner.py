"""Search orchestration: fan out keywords to sources, then normalize, filter and sort."""

import time
from typing import Callable, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from vacancy_bot.adapters.base import SearchHints, SourceClient
from vacancy_bot.adapters.exceptions import AdapterError
from vacancy_bot.config.models import AppConfig, SortOrder
from vacancy_bot.domain.models import Filter, Posting, RawPosting, Source
from vacancy_bot.logging import get_logger
from vacancy_bot.logging.context import log_context
from vacancy_bot.matching.engine import FilterMatcher
from vacancy_bot.matching.sorting import sort_by_date, sort_by_salary
from vacancy_bot.normalization.service import PostingNormalizer
from vacancy_bot.utils.timestamps import utc_now

from .models import SearchRunResult, SourceRunStats

logger = get_logger(__name__, component="pipeline")

SORTERS = {
    SortOrder.DATE.value: sort_by_date,
    SortOrder.SALARY.value: sort_by_salary,
}


class SearchPipeline:
    """
    Runs one search for a user's filter across the sources it selects.

    For every selected source that has a client, one request is issued per
    keyword, sequentially, with ``search.request_delay_ms`` between requests.
    A failing request contributes zero postings and the search carries on.
    The combined records are normalized, de-duplicated by posting id,
    filtered, sorted and cut to ``search.max_results``.
    """

    def __init__(
        self,
        clients: Mapping[Source, SourceClient],
        app_config: AppConfig,
        normalizer: Optional[PostingNormalizer] = None,
        matcher: Optional[FilterMatcher] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the search pipeline.

        Args:
            clients: Source clients keyed by source tag
            app_config: Application configuration (search section is used)
            normalizer: Posting normalizer (a fresh one per run when omitted)
            matcher: Filter matcher
            sleep: Pacing function, replaced by a mock in tests
        """
        self.clients = dict(clients)
        self.app_config = app_config
        self.normalizer = normalizer
        self.matcher = matcher or FilterMatcher()
        self._sleep = sleep

    def run(self, filter_: Filter) -> SearchRunResult:
        """
        Execute a search for ``filter_``.

        Returns:
            SearchRunResult with the postings to show and per-source stats

        Raises:
            No exceptions are raised for source-level failures; they are
            counted in the result.
        """
        run_started_at = utc_now()
        search_id = uuid4().hex
        keywords = sorted(filter_.keywords) or [""]
        hints = SearchHints.from_filter(filter_)
        normalizer = self.normalizer or PostingNormalizer(normalized_at=run_started_at)

        with log_context(search_id=search_id, chat_id=filter_.chat_id):
            logger.info(
                "Search started",
                extra={
                    "event": "pipeline.search.started",
                    "sources": sorted(s.value for s in filter_.sources),
                    "keyword_count": len(filter_.keywords),
                },
            )

            source_stats: List[SourceRunStats] = []
            collected: List[Posting] = []

            for source in Source:
                if source not in filter_.sources:
                    continue
                stats, postings = self._search_source(source, keywords, hints, normalizer)
                source_stats.append(stats)
                collected.extend(postings)

            unique = self._dedupe(collected)
            matched = self.matcher.apply(unique, filter_)
            ordered = SORTERS[self._sort_order()](matched)

            result = SearchRunResult(
                chat_id=filter_.chat_id,
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                postings=ordered[: self.app_config.search.max_results],
                total_fetched=sum(s.fetched_count for s in source_stats),
                total_unique=len(unique),
                total_matched=len(matched),
                source_stats=source_stats,
            )

            logger.info(
                "Search completed",
                extra={
                    "event": "pipeline.search.completed",
                    "duration_ms": int(result.duration_seconds * 1000),
                    "total_fetched": result.total_fetched,
                    "total_unique": result.total_unique,
                    "total_matched": result.total_matched,
                    "returned": len(result.postings),
                    "had_errors": result.had_errors,
                },
            )
            return result

    def _search_source(
        self,
        source: Source,
        keywords: List[str],
        hints: SearchHints,
        normalizer: PostingNormalizer,
    ) -> Tuple[SourceRunStats, List[Posting]]:
        stats = SourceRunStats(source=source.value)
        postings: List[Posting] = []

        client = self.clients.get(source)
        if client is None:
            stats.skipped = True
            logger.debug(
                f"No client for source {source.value}, skipping",
                extra={"event": "pipeline.source.skipped", "source": source.value},
            )
            return stats, postings

        with log_context(source=source.value):
            for index, keyword in enumerate(keywords):
                if index > 0:
                    self._sleep(self.app_config.request_delay_seconds)

                raw_records = self._fetch(client, keyword, hints, stats)
                stats.fetched_count += len(raw_records)

                for raw in raw_records:
                    try:
                        postings.append(normalizer.normalize(raw, source))
                        stats.normalized_count += 1
                    except Exception as e:
                        stats.error_count += 1
                        logger.error(
                            f"Error normalizing record from {source.value}: {e}",
                            extra={
                                "event": "pipeline.record.failed",
                                "external_id": raw.external_id,
                                "error": str(e),
                            },
                            exc_info=True,
                        )

            logger.info(
                f"Source searched: {source.value}",
                extra={
                    "event": "pipeline.source.completed",
                    "requests": stats.requests,
                    "fetched": stats.fetched_count,
                    "normalized": stats.normalized_count,
                    "errors": stats.error_count,
                },
            )

        return stats, postings

    def _fetch(
        self,
        client: SourceClient,
        keyword: str,
        hints: SearchHints,
        stats: SourceRunStats,
    ) -> List[RawPosting]:
        stats.requests += 1
        try:
            return client.search(keyword, hints, self.app_config.search.days_back)
        except AdapterError as e:
            stats.error_count += 1
            stats.error_message = str(e)
            logger.error(
                f"Source error for keyword {keyword!r}: {e}",
                extra={
                    "event": "pipeline.source.error",
                    "keyword": keyword,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
        except Exception as e:
            stats.error_count += 1
            stats.error_message = str(e)
            logger.error(
                f"Unexpected error searching keyword {keyword!r}: {e}",
                extra={
                    "event": "pipeline.source.error",
                    "keyword": keyword,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
                exc_info=True,
            )
        return []

    def _sort_order(self) -> str:
        sort = self.app_config.search.sort
        return sort.value if isinstance(sort, SortOrder) else str(sort)

    @staticmethod
    def _dedupe(postings: List[Posting]) -> List[Posting]:
        """Keep the first posting for each id; the same vacancy often matches several keywords."""
        seen: Dict[str, Posting] = {}
        for posting in postings:
            seen.setdefault(posting.id, posting)
        return list(seen.values())
