"""Normalization of raw source records into Posting models.

- PostingNormalizer: RawPosting -> Posting with derived salary/experience fields
- parsing: best-effort free-text parsers returning ParseOutcome values
"""

from .parsing import (
    ParseOutcome,
    SalaryRange,
    detect_currency,
    is_agency,
    is_remote,
    parse_experience,
    parse_salary_text,
)
from .service import PostingNormalizer, posting_id

__all__ = [
    "PostingNormalizer",
    "posting_id",
    "ParseOutcome",
    "SalaryRange",
    "parse_salary_text",
    "parse_experience",
    "detect_currency",
    "is_agency",
    "is_remote",
]
