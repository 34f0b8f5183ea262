"""Result ordering helpers. Both sorts are stable."""

from typing import List, Sequence

from vacancy_bot.domain.models import Posting


def sort_by_date(postings: Sequence[Posting]) -> List[Posting]:
    """Newest first; postings without a publication date go last."""
    dated = [p for p in postings if p.published_at is not None]
    undated = [p for p in postings if p.published_at is None]
    return sorted(dated, key=lambda p: p.published_at, reverse=True) + undated


def sort_by_salary(postings: Sequence[Posting]) -> List[Posting]:
    """Highest salary_max first; unknown salary_max counts as 0."""
    return sorted(postings, key=lambda p: p.salary_max or 0, reverse=True)
