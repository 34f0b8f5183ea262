"""Shared fixtures for the vacancy bot test suite."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from vacancy_bot.config.models import AppConfig
from vacancy_bot.domain.models import Posting, Source
from vacancy_bot.logging.context import clear_log_context
from vacancy_bot.store.filter_store import FilterStore
from vacancy_bot.store.session_store import DialogSessionStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"

TEST_TOKEN = "123456789:AAEhBOweik6ad9r_QXMENQjcrGbqCr4K-ms"


@pytest.fixture(autouse=True)
def clean_log_context():
    """Keep logging context from leaking between tests."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def make_posting():
    """Factory for normalized postings with sensible defaults."""

    def _make(**overrides) -> Posting:
        fields = {
            "id": "hh_1",
            "title": "Team Lead Backend",
            "company": "Tech Corp",
            "url": "https://hh.ru/vacancy/1",
            "source": Source.HH,
            "published_at": datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return Posting(**fields)

    return _make


@pytest.fixture
def app_config():
    """Default configuration with no pacing delay."""
    return AppConfig.model_validate({"search": {"request_delay_ms": 0}})


@pytest.fixture
def filter_store():
    """In-memory filter store."""
    return FilterStore()


@pytest.fixture
def session_store():
    return DialogSessionStore()


@pytest.fixture
def hh_response():
    """Recorded api.hh.ru /vacancies response."""
    with open(FIXTURES_DIR / "hh_sample_response.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Minimal valid environment for loading configuration."""
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", TEST_TOKEN)
    for name in ("LOG_LEVEL", "FILTERS_PATH", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)
