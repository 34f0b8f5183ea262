"""Posting normalizer: RawPosting -> Posting.

Steps:
1. Build the source-prefixed id and sanitize text fields
2. Derive salary bounds (structured source data first, free text otherwise)
3. Derive experience years, currency, agency and remote flags
4. Parse the publication date (normalization time when unparseable)

Parse failures never abort a record; the affected field stays unset and the
diagnostic is logged at DEBUG.
"""

import logging
import re
from datetime import datetime
from typing import Iterable, Iterator, Optional, Union

from vacancy_bot.domain.models import DEFAULT_CURRENCY, Posting, RawPosting, Source
from vacancy_bot.logging import get_logger
from vacancy_bot.utils.timestamps import ensure_utc, parse_iso_datetime, utc_now

from .parsing import (
    SalaryRange,
    detect_currency,
    is_agency,
    is_remote,
    normalize_currency,
    parse_experience,
    parse_salary_text,
)

logger = get_logger(__name__, component="normalization")


def posting_id(source: Union[Source, str], external_id: str) -> str:
    """Globally unique id: ``<source>_<external id>``."""
    return f"{Source(source).value}_{external_id}"


class PostingNormalizer:
    """Converts source records into canonical Posting models.

    ``normalize`` is idempotent: feeding it a Posting whose derived fields are
    already set returns that Posting unchanged.
    """

    def __init__(
        self,
        normalized_at: Optional[datetime] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize PostingNormalizer.

        Args:
            normalized_at: Timestamp used for unparseable publication dates.
                Defaults to the time of each normalize() call.
            logger_instance: Logger instance (defaults to module logger)
        """
        self.normalized_at = ensure_utc(normalized_at) if normalized_at else None
        self.logger = logger_instance or logger

    def normalize(self, record: Union[RawPosting, Posting], source: Union[Source, str]) -> Posting:
        """Normalize one record from ``source``.

        Args:
            record: Raw record from a source client, or an already built Posting
            source: Source tag the record came from

        Returns:
            Normalized Posting
        """
        if isinstance(record, Posting):
            return self._complete_derived_fields(record)

        source = Source(source)
        pid = posting_id(source, record.external_id)

        title = self._sanitize_text(record.title)
        company = self._sanitize_text(record.company) or None
        city = self._sanitize_text(record.city) or None
        salary_raw = self._sanitize_text(record.salary_text) or None
        experience_raw = self._sanitize_text(record.experience_text) or None

        salary = self._derive_salary(pid, record, salary_raw)
        currency = self._derive_currency(record, salary_raw)

        experience = parse_experience(experience_raw, record.experience_id)
        if experience.diagnostic and experience_raw:
            self._log_diagnostic(pid, "experience", experience.diagnostic)

        published_at = parse_iso_datetime(record.published_at)
        if published_at is None:
            if record.published_at:
                self._log_diagnostic(pid, "published_at", f"unparseable date {record.published_at!r}")
            published_at = self.normalized_at or utc_now()

        posting = Posting(
            id=pid,
            title=title,
            company=company,
            salary_raw=salary_raw,
            salary_min=salary.minimum,
            salary_max=salary.maximum,
            salary_currency=currency,
            experience_raw=experience_raw,
            experience_years=experience.value,
            city=city,
            remote=is_remote(record.schedule, record.address),
            agency=is_agency(company, record.employer_type),
            url=record.url.strip(),
            source=source,
            published_at=published_at,
        )

        self.logger.debug(
            "Normalized posting",
            extra={
                "event": "normalization.posting.normalized",
                "posting_id": pid,
                "salary_min": posting.salary_min,
                "salary_max": posting.salary_max,
                "experience_years": posting.experience_years,
                "remote": posting.remote,
                "agency": posting.agency,
            },
        )

        return posting

    def normalize_batch(
        self, records: Iterable[RawPosting], source: Union[Source, str]
    ) -> Iterator[Posting]:
        """Normalize a batch of records from one source."""
        for record in records:
            yield self.normalize(record, source)

    def _derive_salary(
        self, pid: str, record: RawPosting, salary_raw: Optional[str]
    ) -> SalaryRange:
        # Structured bounds from the source make free-text parsing unnecessary
        if record.salary_from is not None or record.salary_to is not None:
            return SalaryRange(minimum=record.salary_from, maximum=record.salary_to)

        if not salary_raw:
            return SalaryRange()

        outcome = parse_salary_text(salary_raw)
        if not outcome.ok:
            self._log_diagnostic(pid, "salary", outcome.diagnostic)
            return SalaryRange()
        return outcome.value

    @staticmethod
    def _derive_currency(record: RawPosting, salary_raw: Optional[str]) -> str:
        structured = normalize_currency(record.salary_currency)
        if structured:
            return structured
        detected = detect_currency(salary_raw)
        return detected.value if detected.ok else DEFAULT_CURRENCY

    def _complete_derived_fields(self, posting: Posting) -> Posting:
        """Fill derived fields a Posting is missing; no-op when already derived."""
        updates = {}

        if posting.salary_min is None and posting.salary_max is None and posting.salary_raw:
            salary = parse_salary_text(posting.salary_raw)
            if salary.ok:
                updates["salary_min"] = salary.value.minimum
                updates["salary_max"] = salary.value.maximum

        if posting.experience_years is None and posting.experience_raw:
            experience = parse_experience(posting.experience_raw)
            if experience.ok:
                updates["experience_years"] = experience.value

        if not updates:
            return posting
        return posting.model_copy(update=updates)

    def _log_diagnostic(self, pid: str, field: str, diagnostic: Optional[str]) -> None:
        self.logger.debug(
            f"Could not derive {field} for {pid}: {diagnostic}",
            extra={
                "event": "normalization.field.unparsed",
                "posting_id": pid,
                "field": field,
            },
        )

    @staticmethod
    def _sanitize_text(text: Optional[str]) -> str:
        """Trim and collapse whitespace; None becomes an empty string."""
        if not text:
            return ""
        return re.sub(r"\s+", " ", text.strip())
