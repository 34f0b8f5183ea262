"""Core domain models: sources, postings, user filters and dialog sessions.

- Source: upstream job board tag, with display lookup tables
- RawPosting: record as returned by a source client, before normalization
- Posting: immutable normalized job posting
- Filter: a user's saved search criteria (one per chat)
- DialogState / DialogSession: transient per-chat conversation state
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vacancy_bot.utils.timestamps import ensure_utc

DEFAULT_CURRENCY = "RUB"


class Source(str, Enum):
    """Supported job boards."""

    HH = "hh"
    HABR = "habr"
    LINKEDIN = "linkedin"
    GETMATCH = "getmatch"


SOURCE_EMOJI = {
    Source.HH: "🏢",
    Source.HABR: "📘",
    Source.LINKEDIN: "🔗",
    Source.GETMATCH: "🤝",
}
DEFAULT_SOURCE_EMOJI = "📌"

SOURCE_NAMES = {
    Source.HH: "HeadHunter",
    Source.HABR: "Хабр Карьера",
    Source.LINKEDIN: "LinkedIn",
    Source.GETMATCH: "GetMatch",
}

DEFAULT_KEYWORDS = frozenset({"менеджер", "product manager", "team lead"})


def source_emoji(source: str) -> str:
    """Emoji shown next to postings from ``source``."""
    try:
        return SOURCE_EMOJI[Source(source)]
    except ValueError:
        return DEFAULT_SOURCE_EMOJI


def source_name(source: str) -> str:
    """Human-readable board name; unknown tags are shown as-is."""
    try:
        return SOURCE_NAMES[Source(source)]
    except ValueError:
        return str(source)


class RawPosting(BaseModel):
    """Source record before normalization.

    Source clients map their own payloads onto these loosely typed fields.
    Only ``external_id`` is required; every other field may be missing and
    the normalizer derives what it can.
    """

    external_id: str = Field(..., min_length=1, description="Posting ID within the source")
    title: str = Field("", description="Posting title")
    company: Optional[str] = Field(None, description="Employer name")
    employer_type: Optional[str] = Field(None, description="Structured employer type, e.g. 'agency'")
    salary_text: Optional[str] = Field(None, description="Free-text salary")
    salary_from: Optional[int] = Field(None, description="Structured lower salary bound")
    salary_to: Optional[int] = Field(None, description="Structured upper salary bound")
    salary_currency: Optional[str] = Field(None, description="Structured salary currency code")
    experience_text: Optional[str] = Field(None, description="Free-text experience requirement")
    experience_id: Optional[str] = Field(None, description="Structured experience identifier")
    city: Optional[str] = Field(None, description="City or area name")
    schedule: Optional[str] = Field(None, description="Schedule / work format name")
    address: Optional[str] = Field(None, description="Raw address text")
    url: str = Field("", description="Link to the posting")
    published_at: Optional[str] = Field(None, description="Publication timestamp as sent by the source")

    @field_validator("external_id")
    @classmethod
    def strip_external_id(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("external_id cannot be empty or whitespace-only")
        return stripped


class Posting(BaseModel):
    """Normalized job posting.

    Frozen once built. ``salary_min``/``salary_max``/``experience_years`` are
    derived from ``salary_raw``/``experience_raw`` (or structured source data)
    exactly once by the normalizer.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Globally unique id, prefixed by source (hh_123)")
    title: str = Field("", description="Posting title")
    company: Optional[str] = None
    salary_raw: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_currency: str = DEFAULT_CURRENCY
    experience_raw: Optional[str] = None
    experience_years: Optional[int] = None
    city: Optional[str] = None
    remote: bool = False
    agency: bool = False
    url: str = ""
    source: Source
    published_at: Optional[datetime] = None

    @field_validator("published_at")
    @classmethod
    def published_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def has_derived_fields(self) -> bool:
        """True once salary or experience has been derived."""
        return (
            self.salary_min is not None
            or self.salary_max is not None
            or self.experience_years is not None
        )


class Filter(BaseModel):
    """A user's search criteria, keyed by chat id."""

    chat_id: int
    min_salary: Optional[int] = None
    max_salary: Optional[int] = None
    salary_currency: str = DEFAULT_CURRENCY
    city: Optional[str] = None
    remote_only: bool = False
    keywords: Set[str] = Field(default_factory=lambda: set(DEFAULT_KEYWORDS))
    sources: Set[Source] = Field(default_factory=lambda: set(Source))
    min_experience_years: Optional[int] = None
    exclude_agencies: bool = False

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, v: Set[str]) -> Set[str]:
        """Keywords are stored trimmed and lowercase; blanks are dropped."""
        return {kw.strip().lower() for kw in v if kw and kw.strip()}

    def has_salary_filter(self) -> bool:
        return self.min_salary is not None or self.max_salary is not None

    def has_city_filter(self) -> bool:
        return bool(self.city)

    def is_active(self) -> bool:
        """Whether the filter restricts anything at all.

        Only salary bounds, city, remote_only and keywords count. A filter that
        sets nothing but exclude_agencies, min_experience_years or sources is
        inactive and lets every posting through.
        """
        return (
            self.has_salary_filter()
            or self.has_city_filter()
            or self.remote_only
            or bool(self.keywords)
        )

    def describe(self) -> str:
        """Human-readable summary of the active criteria."""
        lines = ["🔍 Текущие фильтры:"]

        if self.keywords:
            lines.append(f"• Ключевые слова: {', '.join(sorted(self.keywords))}")

        if self.has_salary_filter():
            parts = []
            if self.min_salary is not None:
                parts.append(f"от {self.min_salary}")
            if self.max_salary is not None:
                parts.append(f"до {self.max_salary}")
            currency = self.salary_currency or DEFAULT_CURRENCY
            lines.append(f"• Зарплата: {' '.join(parts)} {currency}")

        if self.has_city_filter():
            lines.append(f"• Город: {self.city}")

        if self.remote_only:
            lines.append("• Только удаленная работа")

        if self.min_experience_years is not None:
            lines.append(f"• Опыт: от {self.min_experience_years} лет")

        if self.exclude_agencies:
            lines.append("• Без кадровых агентств")

        if self.sources != set(Source):
            names = [SOURCE_NAMES[s] for s in Source if s in self.sources]
            lines.append(f"• Источники: {', '.join(names) if names else 'нет'}")

        return "\n".join(lines) + "\n"


class DialogState(str, Enum):
    """Conversation states; every AWAITING_* state consumes exactly one message."""

    NONE = "NONE"
    AWAITING_MIN_SALARY = "AWAITING_MIN_SALARY"
    AWAITING_MAX_SALARY = "AWAITING_MAX_SALARY"
    AWAITING_CITY = "AWAITING_CITY"
    AWAITING_KEYWORD = "AWAITING_KEYWORD"


@dataclass
class DialogSession:
    """Per-chat conversation state.

    Attributes:
        chat_id: Chat the session belongs to
        state: Current dialog state
        temp_data: Scratch buffer for multi-step entry
    """

    chat_id: int
    state: DialogState = DialogState.NONE
    temp_data: Optional[str] = None

    @property
    def is_idle(self) -> bool:
        return self.state is DialogState.NONE
