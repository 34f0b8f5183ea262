"""Parsing of values typed by the user during a dialog."""

import re
from typing import List, Optional

from vacancy_bot.domain.models import Source
from vacancy_bot.normalization.parsing import ParseOutcome, normalize_currency

_PLAIN_INTEGER = re.compile(r"^\d+$")
# Groups of three digits after the first, all split by the same separator:
# "150 000", "1 500 000" (also NBSP / narrow NBSP), "150'000", "150,000", "150_000"
_GROUPED_INTEGER = re.compile(r"^\d{1,3}([\s'’,._])\d{3}(?:\1\d{3})*$")
_INTEGER = re.compile(r"^-?\d+$")
_CURRENCY_CODE = re.compile(r"^[A-Za-z]{3}$")
_LIST_SEPARATORS = re.compile(r"[\s,;]+")

MAX_EXPERIENCE_YEARS = 50


def parse_amount(text: Optional[str]) -> ParseOutcome[int]:
    """Parse a non-negative whole salary amount.

    Separators are only accepted between digit groups of three, so "1,5" and
    "150000.50" are rejected rather than read as a different number.
    """
    cleaned = (text or "").strip()
    if not cleaned:
        return ParseOutcome(diagnostic="empty")

    negative = cleaned.startswith("-")
    digits = cleaned[1:].lstrip() if negative else cleaned

    if _PLAIN_INTEGER.match(digits):
        value = int(digits)
    elif _GROUPED_INTEGER.match(digits):
        value = int(re.sub(r"\D", "", digits))
    else:
        return ParseOutcome(diagnostic=f"not a whole number: {text!r}")

    if negative and value:
        return ParseOutcome(diagnostic=f"negative amount: -{value}")
    return ParseOutcome(value=value)


def parse_years(text: Optional[str]) -> ParseOutcome[int]:
    cleaned = (text or "").strip()
    if not _INTEGER.match(cleaned):
        return ParseOutcome(diagnostic=f"not a number: {text!r}")

    value = int(cleaned)
    if not 0 <= value <= MAX_EXPERIENCE_YEARS:
        return ParseOutcome(diagnostic=f"out of range: {value}")
    return ParseOutcome(value=value)


def parse_keyword(text: Optional[str]) -> ParseOutcome[str]:
    keyword = (text or "").strip().lower()
    if not keyword:
        return ParseOutcome(diagnostic="empty")
    return ParseOutcome(value=keyword)


def parse_sources(text: Optional[str]) -> ParseOutcome[List[Source]]:
    """Parse source tags separated by spaces or commas ("hh habr")."""
    tags = [tag for tag in _LIST_SEPARATORS.split((text or "").strip().lower()) if tag]
    if not tags:
        return ParseOutcome(diagnostic="empty")

    known = {s.value for s in Source}
    unknown = [tag for tag in tags if tag not in known]
    if unknown:
        return ParseOutcome(diagnostic=f"unknown sources: {', '.join(unknown)}")

    sources: List[Source] = []
    for tag in tags:
        if Source(tag) not in sources:
            sources.append(Source(tag))
    return ParseOutcome(value=sources)


def parse_currency(text: Optional[str]) -> ParseOutcome[str]:
    """Parse a three-letter currency code; RUR is stored as RUB."""
    cleaned = (text or "").strip()
    if not _CURRENCY_CODE.match(cleaned):
        return ParseOutcome(diagnostic=f"not a currency code: {text!r}")
    return ParseOutcome(value=normalize_currency(cleaned))
