"""Filter matching engine and result ordering.

- FilterMatcher / apply_filters: stable filtering of postings by a user Filter
- MatchResult: per-posting decision with the failed checks
- sort_by_date / sort_by_salary: result ordering
"""

from .engine import (
    FilterMatcher,
    apply_filters,
    matches_agency,
    matches_city,
    matches_experience,
    matches_keywords,
    matches_remote,
    matches_salary,
)
from .models import MatchResult
from .sorting import sort_by_date, sort_by_salary

__all__ = [
    "FilterMatcher",
    "MatchResult",
    "apply_filters",
    "matches_keywords",
    "matches_salary",
    "matches_city",
    "matches_remote",
    "matches_experience",
    "matches_agency",
    "sort_by_date",
    "sort_by_salary",
]
