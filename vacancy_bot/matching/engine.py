"""Filter matching engine.

A posting survives an active filter only if every check passes:
keywords, salary, city, remote, experience and agency. An absent or inactive
filter lets everything through unchanged, even when exclude_agencies,
min_experience_years or sources are set on it.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from vacancy_bot.domain.models import Filter, Posting

from .models import MatchResult

logger = logging.getLogger(__name__)


def matches_keywords(posting: Posting, filter_: Filter) -> bool:
    """Any keyword is a substring of the lowercased "title company" text."""
    if not filter_.keywords:
        return True

    title = (posting.title or "").lower()
    company = (posting.company or "").lower()
    haystack = f"{title} {company}"

    return any(keyword.lower() in haystack for keyword in filter_.keywords)


def matches_salary(posting: Posting, filter_: Filter) -> bool:
    """Reject only on known salary data that contradicts the bounds.

    Postings without salary information always pass.
    """
    if not filter_.has_salary_filter():
        return True

    if (
        filter_.min_salary is not None
        and posting.salary_min is not None
        and posting.salary_min < filter_.min_salary
    ):
        return False

    if (
        filter_.max_salary is not None
        and posting.salary_max is not None
        and posting.salary_max > filter_.max_salary
    ):
        return False

    return True


def matches_city(posting: Posting, filter_: Filter) -> bool:
    """Case-insensitive substring match in either direction.

    "Москва" matches "Москва и МО" and the other way round.
    """
    if not filter_.has_city_filter():
        return True
    if not posting.city:
        return False

    city = posting.city.lower()
    target = filter_.city.lower()
    return target in city or city in target


def matches_remote(posting: Posting, filter_: Filter) -> bool:
    if not filter_.remote_only:
        return True
    return posting.remote


def matches_experience(posting: Posting, filter_: Filter) -> bool:
    if filter_.min_experience_years is None:
        return True
    if posting.experience_years is None:
        return False
    return posting.experience_years >= filter_.min_experience_years


def matches_agency(posting: Posting, filter_: Filter) -> bool:
    return not filter_.exclude_agencies or not posting.agency


CHECKS: Tuple[Tuple[str, Callable[[Posting, Filter], bool]], ...] = (
    ("keywords", matches_keywords),
    ("salary", matches_salary),
    ("city", matches_city),
    ("remote", matches_remote),
    ("experience", matches_experience),
    ("agency", matches_agency),
)


class FilterMatcher:
    """Evaluates postings against a user's Filter."""

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        self.logger = logger_instance or logger

    def evaluate(self, posting: Posting, filter_: Optional[Filter]) -> MatchResult:
        """Run every check and report which ones failed.

        Args:
            posting: Normalized posting
            filter_: User filter; None or inactive means pass-through

        Returns:
            MatchResult with the decision and failed check names
        """
        if filter_ is None or not filter_.is_active():
            return MatchResult(is_match=True, filter_active=False)

        failed = [name for name, check in CHECKS if not check(posting, filter_)]
        return MatchResult(is_match=not failed, failed_checks=failed)

    def apply(self, postings: Sequence[Posting], filter_: Optional[Filter]) -> List[Posting]:
        """Return the postings that match, preserving their relative order.

        An absent or inactive filter returns the input as a new list with the
        same elements in the same order.
        """
        if filter_ is None or not filter_.is_active():
            self.logger.debug(
                "Filter inactive, passing postings through",
                extra={"event": "matching.filter.inactive", "count": len(postings)},
            )
            return list(postings)

        survivors = []
        for posting in postings:
            result = self.evaluate(posting, filter_)
            if result.is_match:
                survivors.append(posting)
            else:
                self.logger.debug(
                    f"Posting rejected: {posting.id}",
                    extra={
                        "event": "matching.posting.rejected",
                        "posting_id": posting.id,
                        "reason": result.reason,
                    },
                )

        self.logger.debug(
            "Filter applied",
            extra={
                "event": "matching.filter.applied",
                "chat_id": filter_.chat_id,
                "total": len(postings),
                "matched": len(survivors),
            },
        )
        return survivors


_default_matcher = FilterMatcher()


def apply_filters(postings: Sequence[Posting], filter_: Optional[Filter]) -> List[Posting]:
    """Stable filter of ``postings`` by ``filter_``; see FilterMatcher.apply."""
    return _default_matcher.apply(postings, filter_)
