"""Best-effort parsers for free-text posting fields.

Every parser returns a ParseOutcome: the parsed value (or None) plus an
optional diagnostic explaining why nothing could be derived. None of them
raise on bad input.
"""

import re
from dataclasses import dataclass
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")

# A single whitespace between a digit and a 3-digit group is thousands grouping:
# "1 500 000" -> "1500000". Covers NBSP and narrow NBSP, which \s includes.
_THOUSANDS_GAP = re.compile(r"(?<=\d)\s(?=\d{3}(?!\d))")
_NON_SALARY_CHARS = re.compile(r"[^\d\-\s]")

# Checked in order, first match wins
EXPERIENCE_RULES: Tuple[Tuple[str, int], ...] = (
    ("без опыта", 0),
    ("1-3", 1),
    ("3-6", 3),
    ("более 6", 6),
)

# api.hh.ru experience dictionary ids
EXPERIENCE_IDS = {
    "noExperience": 0,
    "between1And3": 1,
    "between3And6": 3,
    "moreThan6": 6,
}

AGENCY_MARKERS: Tuple[str, ...] = ("агентство", "кадровое", "recruitment", "hr", "персонал")
AGENCY_EMPLOYER_TYPE = "agency"

REMOTE_MARKER = "удален"

CURRENCY_ALIASES = {
    "RUR": "RUB",
}

# Checked in order against the lowercased salary text
CURRENCY_MARKERS: Tuple[Tuple[str, str], ...] = (
    ("₽", "RUB"),
    ("руб", "RUB"),
    ("$", "USD"),
    ("usd", "USD"),
    ("€", "EUR"),
    ("eur", "EUR"),
)


@dataclass(frozen=True)
class ParseOutcome(Generic[T]):
    """Parsed value, or None with a diagnostic."""

    value: Optional[T] = None
    diagnostic: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class SalaryRange:
    """Salary bounds derived from free text; either bound may be unknown."""

    minimum: Optional[int] = None
    maximum: Optional[int] = None


def _numeric_tokens(text: str) -> list:
    collapsed = _THOUSANDS_GAP.sub("", text)
    cleaned = _NON_SALARY_CHARS.sub(" ", collapsed)
    return [token for token in cleaned.split() if token.isascii() and token.isdigit()]


def parse_salary_text(text: Optional[str]) -> ParseOutcome[SalaryRange]:
    """Derive salary bounds from text like "от 100 000 до 150 000 руб".

    Two or more amounts give (min, max) in order of appearance. A single
    amount is a minimum when the text says "от", a maximum when it says "до",
    and is otherwise left unassigned: "100000 руб" gives no bounds at all.

    Example:
        >>> parse_salary_text("до 80 000 руб").value
        SalaryRange(minimum=None, maximum=80000)
    """
    if not text or not text.strip():
        return ParseOutcome(diagnostic="salary text is empty")

    amounts = [int(token) for token in _numeric_tokens(text)]

    if len(amounts) >= 2:
        return ParseOutcome(SalaryRange(minimum=amounts[0], maximum=amounts[1]))

    if len(amounts) == 1:
        lowered = text.lower()
        if "от" in lowered:
            return ParseOutcome(SalaryRange(minimum=amounts[0]))
        if "до" in lowered:
            return ParseOutcome(SalaryRange(maximum=amounts[0]))
        return ParseOutcome(diagnostic=f"single amount without от/до: {text!r}")

    return ParseOutcome(diagnostic=f"no amounts found in {text!r}")


def parse_experience(
    text: Optional[str], experience_id: Optional[str] = None
) -> ParseOutcome[int]:
    """Map an experience requirement to minimum years (0, 1, 3 or 6).

    A structured id from the source takes precedence over the free text.
    """
    if experience_id and experience_id in EXPERIENCE_IDS:
        return ParseOutcome(EXPERIENCE_IDS[experience_id])

    if not text:
        return ParseOutcome(diagnostic="experience text is empty")

    lowered = text.lower()
    for marker, years in EXPERIENCE_RULES:
        if marker in lowered:
            return ParseOutcome(years)

    return ParseOutcome(diagnostic=f"unrecognized experience text: {text!r}")


def is_agency(company: Optional[str], employer_type: Optional[str] = None) -> bool:
    """Staffing agencies are recognized by name markers or employer type."""
    if employer_type == AGENCY_EMPLOYER_TYPE:
        return True
    if not company:
        return False
    lowered = company.lower()
    return any(marker in lowered for marker in AGENCY_MARKERS)


def is_remote(*texts: Optional[str]) -> bool:
    """True when any schedule/address text mentions remote work ("удаленная")."""
    return any(text and REMOTE_MARKER in text.lower() for text in texts)


def normalize_currency(code: Optional[str]) -> Optional[str]:
    """Upper-case a currency code and map legacy aliases (RUR -> RUB)."""
    if not code or not code.strip():
        return None
    upper = code.strip().upper()
    return CURRENCY_ALIASES.get(upper, upper)


def detect_currency(text: Optional[str]) -> ParseOutcome[str]:
    """Guess the currency of a free-text salary."""
    if not text:
        return ParseOutcome(diagnostic="salary text is empty")

    lowered = text.lower()
    for marker, currency in CURRENCY_MARKERS:
        if marker in lowered:
            return ParseOutcome(currency)

    return ParseOutcome(diagnostic=f"no currency marker in {text!r}")
