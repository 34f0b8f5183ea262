"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator

from vacancy_bot.domain.models import Source


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class SortOrder(str, Enum):
    """Ordering of search results sent to the user."""

    DATE = "date"
    SALARY = "salary"


class SearchConfig(BaseModel):
    """How searches fan out to sources and how results are returned."""

    days_back: int = Field(7, ge=1, le=30, description="Only postings published within N days")
    request_delay_ms: int = Field(
        300, ge=0, le=10000, description="Pause between consecutive keyword requests to one source"
    )
    max_results: int = Field(10, ge=1, le=50, description="Posting cards sent per search")
    per_page: int = Field(50, ge=1, le=100, description="Page size requested from sources")
    sort: SortOrder = Field(SortOrder.DATE, description="Result ordering (date or salary)")

    model_config = {"use_enum_values": True}


class SourcesConfig(BaseModel):
    """Which job boards the bot queries at all."""

    enabled: List[Source] = Field(
        default_factory=lambda: list(Source), description="Sources available to users"
    )

    @field_validator("enabled")
    @classmethod
    def dedupe_sources(cls, v: List[Source]) -> List[Source]:
        seen = []
        for source in v:
            if source not in seen:
                seen.append(source)
        return seen


class StorageConfig(BaseModel):
    """Filter persistence settings."""

    filters_path: str = Field(
        "data/user_filters.json", min_length=1, description="JSON file holding user filters"
    )

    @field_validator("filters_path")
    @classmethod
    def strip_path(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("filters_path cannot be empty")
        return stripped


class TelegramConfig(BaseModel):
    """Telegram Bot API transport settings."""

    api_url: str = Field("https://api.telegram.org", description="Bot API base URL")
    poll_timeout: int = Field(30, ge=0, le=60, description="getUpdates long-poll timeout (seconds)")
    parse_mode: str = Field("HTML", description="parse_mode for outgoing messages")
    workers: int = Field(4, ge=1, le=64, description="Chats processed concurrently")

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AdvancedConfig(BaseModel):
    """Advanced runtime settings."""

    http_request_timeout: int = Field(
        30, ge=5, le=300, description="Request timeout for source API calls (seconds)"
    )
    user_agent: str = Field(
        "VacancyBot/3.0",
        min_length=1,
        description="User-Agent string for HTTP requests",
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class AppConfig(BaseModel):
    """Root configuration object for the vacancy bot."""

    search: SearchConfig = Field(default_factory=SearchConfig, description="Search settings")
    sources: SourcesConfig = Field(default_factory=SourcesConfig, description="Enabled sources")
    storage: StorageConfig = Field(default_factory=StorageConfig, description="Filter storage")
    telegram: TelegramConfig = Field(default_factory=TelegramConfig, description="Telegram transport")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    advanced: AdvancedConfig = Field(
        default_factory=AdvancedConfig, description="Advanced runtime settings"
    )

    @property
    def request_delay_seconds(self) -> float:
        return self.search.request_delay_ms / 1000.0
