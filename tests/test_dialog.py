"""Unit tests for the dialog state machine, command parsing and BotService."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from vacancy_bot.channel.base import Channel, InboundMessage
from vacancy_bot.dialog import (
    BotService,
    Command,
    DialogEngine,
    parse_amount,
    parse_command,
    parse_currency,
    parse_keyword,
    parse_sources,
    parse_years,
)
from vacancy_bot.dialog import messages
from vacancy_bot.domain.models import DEFAULT_KEYWORDS, DialogState, Source
from vacancy_bot.pipeline.models import SearchRunResult
from vacancy_bot.store import FilterStore

CHAT = 100


def _result(chat_id, postings=(), total_matched=None):
    now = datetime(2025, 11, 5, tzinfo=timezone.utc)
    postings = list(postings)
    return SearchRunResult(
        chat_id=chat_id,
        run_started_at=now,
        run_finished_at=now,
        postings=postings,
        total_matched=len(postings) if total_matched is None else total_matched,
    )


@pytest.fixture
def search():
    """Search function returning no postings."""
    return Mock(side_effect=lambda filter_: _result(filter_.chat_id))


@pytest.fixture
def engine(filter_store, session_store, search):
    return DialogEngine(filter_store=filter_store, session_store=session_store, search=search)


class RecordingChannel(Channel):
    def __init__(self):
        self.sent = []

    def send_message(self, chat_id, text):
        self.sent.append((chat_id, text))
        return True


class TestParseCommand:
    """Tests for command recognition."""

    @pytest.mark.parametrize(
        "text,command",
        [
            ("/start", Command.HELP),
            ("помощь", Command.HELP),
            ("/filters", Command.FILTERS),
            ("Фильтры", Command.FILTERS),
            ("  /search  ", Command.SEARCH),
            ("поиск", Command.SEARCH),
            ("set min salary", Command.SET_MIN_SALARY),
            ("Мин зарплата", Command.SET_MIN_SALARY),
            ("set max salary", Command.SET_MAX_SALARY),
            ("set city", Command.SET_CITY),
            ("город", Command.SET_CITY),
            ("add keyword", Command.ADD_KEYWORD),
            ("/clear_keywords", Command.CLEAR_KEYWORDS),
            ("/remote", Command.REMOTE),
            ("/agencies", Command.AGENCIES),
            ("/sources", Command.SOURCES),
            ("Источники", Command.SOURCES),
            ("/source", Command.TOGGLE_SOURCE),
            ("/currency", Command.CURRENCY),
            ("/reset", Command.RESET),
            ("/cancel", Command.CANCEL),
            ("ОТМЕНА", Command.CANCEL),
            ("/search@vacancy_bot", Command.SEARCH),
        ],
    )
    def test_tokens(self, text, command):
        parsed = parse_command(text)

        assert parsed is not None
        assert parsed.command is command
        assert parsed.argument is None

    def test_argument_preserves_case(self):
        parsed = parse_command("/set_city Нижний Новгород")

        assert parsed.command is Command.SET_CITY
        assert parsed.argument == "Нижний Новгород"

    def test_plain_alias_with_argument(self):
        parsed = parse_command("город Казань")

        assert parsed.command is Command.SET_CITY
        assert parsed.argument == "Казань"

    def test_argument_on_command_without_value_is_unknown(self):
        assert parse_command("поиск работы") is None

    def test_token_prefix_without_space_is_unknown(self):
        assert parse_command("/searching") is None

    @pytest.mark.parametrize("text", [None, "", "привет", "python"])
    def test_unknown(self, text):
        assert parse_command(text) is None


class TestValidation:
    @pytest.mark.parametrize(
        "text,value",
        [
            ("150000", 150000),
            (" 150 000 ", 150000),
            ("150\u00a0000", 150000),
            ("1\u202f500\u202f000", 1500000),
            ("150,000", 150000),
            ("1'500'000", 1500000),
            ("150_000", 150000),
            ("0", 0),
        ],
    )
    def test_amounts(self, text, value):
        assert parse_amount(text).value == value

    @pytest.mark.parametrize(
        "text",
        ["abc", "", "-5", "10k", "1e5", "1,5", "150.5", "150000.50", "15,00", "1,500.000", "150 00"],
    )
    def test_invalid_amounts(self, text):
        outcome = parse_amount(text)

        assert outcome.value is None
        assert outcome.diagnostic

    def test_years(self):
        assert parse_years("3").value == 3
        assert parse_years("-1").value is None
        assert parse_years("много").value is None

    def test_keyword(self):
        assert parse_keyword("  Python ").value == "python"
        assert parse_keyword("   ").value is None

    def test_sources(self):
        assert parse_sources("HH, habr hh").value == [Source.HH, Source.HABR]
        assert parse_sources("monster").diagnostic == "unknown sources: monster"
        assert parse_sources("  ").value is None

    def test_currency(self):
        assert parse_currency(" usd ").value == "USD"
        assert parse_currency("rur").value == "RUB"
        assert parse_currency("доллар").value is None


class TestDialogScenarios:
    """End-to-end dialog flows through DialogEngine.handle."""

    def test_set_city_flow(self, engine, filter_store, session_store):
        replies = engine.handle(CHAT, "set city")

        assert replies == [messages.PROMPT_CITY]
        assert session_store.get_state(CHAT) is DialogState.AWAITING_CITY

        replies = engine.handle(CHAT, "Казань")

        assert filter_store.get(CHAT).city == "Казань"
        assert session_store.get_state(CHAT) is DialogState.NONE
        assert len(replies) == 1
        assert "• Город: Казань" in replies[0]

    def test_set_city_flow_persisted(self, tmp_path, session_store, search):
        path = tmp_path / "filters.json"
        engine = DialogEngine(FilterStore(path), session_store, search)

        engine.handle(CHAT, "set city")
        engine.handle(CHAT, "Казань")

        assert FilterStore(path).get(CHAT).city == "Казань"

    def test_invalid_min_salary(self, engine, filter_store, session_store):
        filter_store.update_min_salary(CHAT, 100000)
        engine.handle(CHAT, "/set_min_salary")
        assert session_store.get_state(CHAT) is DialogState.AWAITING_MIN_SALARY

        replies = engine.handle(CHAT, "abc")

        assert replies == [messages.INVALID_SALARY]
        assert filter_store.get(CHAT).min_salary == 100000
        assert session_store.get_state(CHAT) is DialogState.NONE

    @pytest.mark.parametrize("text", ["150000.50", "1,5"])
    def test_fractional_min_salary_rejected(self, engine, filter_store, session_store, text):
        engine.handle(CHAT, "/set_min_salary")

        replies = engine.handle(CHAT, text)

        assert replies == [messages.INVALID_SALARY]
        assert filter_store.get(CHAT).min_salary is None
        assert session_store.get_state(CHAT) is DialogState.NONE

    def test_min_salary_flow(self, engine, filter_store):
        engine.handle(CHAT, "мин зарплата")
        replies = engine.handle(CHAT, "150 000")

        assert filter_store.get(CHAT).min_salary == 150000
        assert replies[0].startswith(messages.SALARY_MIN_UPDATED)
        assert "• Зарплата: от 150000 RUB" in replies[0]

    def test_max_salary_with_argument(self, engine, filter_store, session_store):
        engine.handle(CHAT, "/set_max_salary 300000")

        assert filter_store.get(CHAT).max_salary == 300000
        assert session_store.get_state(CHAT) is DialogState.NONE

    def test_add_keyword_flow(self, engine, filter_store):
        engine.handle(CHAT, "/add_keyword")
        engine.handle(CHAT, "  Python  ")

        assert "python" in filter_store.get(CHAT).keywords

    def test_command_text_is_taken_as_field_value(self, engine, filter_store, session_store):
        engine.handle(CHAT, "/set_city")
        engine.handle(CHAT, "/search")

        assert filter_store.get(CHAT).city == "/search"
        assert session_store.get_state(CHAT) is DialogState.NONE

    @pytest.mark.parametrize(
        "command,state",
        [
            ("/set_min_salary", DialogState.AWAITING_MIN_SALARY),
            ("/set_max_salary", DialogState.AWAITING_MAX_SALARY),
            ("/set_city", DialogState.AWAITING_CITY),
            ("/add_keyword", DialogState.AWAITING_KEYWORD),
        ],
    )
    def test_cancel_from_any_state(self, engine, filter_store, session_store, command, state):
        before = filter_store.get(CHAT)
        engine.handle(CHAT, command)
        assert session_store.get_state(CHAT) is state

        replies = engine.handle(CHAT, "отмена")

        assert replies == [messages.CANCELLED]
        assert session_store.get_state(CHAT) is DialogState.NONE
        assert filter_store.get(CHAT) == before

    def test_cancel_when_idle(self, engine):
        assert engine.handle(CHAT, "/cancel") == [messages.NOTHING_TO_CANCEL]

    def test_unknown_text(self, engine, filter_store):
        before = filter_store.get(CHAT)

        assert engine.handle(CHAT, "привет") == [messages.UNKNOWN_COMMAND]
        assert filter_store.get(CHAT) == before

    def test_help_lists_commands_and_sources(self, engine):
        reply = engine.handle(CHAT, "/start")[0]

        assert "/search" in reply
        assert "HeadHunter" in reply

    def test_filters(self, engine):
        reply = engine.handle(CHAT, "/filters")[0]

        assert reply.startswith("🔍 Текущие фильтры:")
        assert "• Ключевые слова: product manager, team lead, менеджер" in reply

    def test_filters_escapes_markup(self, engine):
        engine.handle(CHAT, "/add_keyword <b>c++</b>")

        reply = engine.handle(CHAT, "/filters")[0]

        assert "&lt;b&gt;c++&lt;/b&gt;" in reply
        assert "<b>c++" not in reply

    def test_toggles(self, engine, filter_store):
        reply = engine.handle(CHAT, "/remote")[0]
        assert filter_store.get(CHAT).remote_only is True
        assert reply.startswith(messages.REMOTE_ON)

        engine.handle(CHAT, "/remote")
        assert filter_store.get(CHAT).remote_only is False

        engine.handle(CHAT, "/agencies")
        assert filter_store.get(CHAT).exclude_agencies is True

    def test_clear_and_remove_keywords(self, engine, filter_store):
        engine.handle(CHAT, "/remove_keyword Менеджер")
        assert "менеджер" not in filter_store.get(CHAT).keywords

        engine.handle(CHAT, "/clear_keywords")
        assert filter_store.get(CHAT).keywords == set()

    def test_remove_keyword_without_argument(self, engine):
        assert engine.handle(CHAT, "/remove_keyword") == [messages.REMOVE_KEYWORD_USAGE]

    def test_experience(self, engine, filter_store):
        engine.handle(CHAT, "/experience 3")
        assert filter_store.get(CHAT).min_experience_years == 3

        assert engine.handle(CHAT, "/experience") == [messages.INVALID_EXPERIENCE]
        assert filter_store.get(CHAT).min_experience_years == 3

    def test_sources(self, engine, filter_store, search):
        reply = engine.handle(CHAT, "/sources hh habr")[0]

        assert filter_store.get(CHAT).sources == {Source.HH, Source.HABR}
        assert reply.startswith(messages.SOURCES_UPDATED)
        assert "• Источники: HeadHunter, Хабр Карьера" in reply

        engine.handle(CHAT, "/search")
        assert search.call_args[0][0].sources == {Source.HH, Source.HABR}

    def test_sources_rejects_unknown(self, engine, filter_store):
        assert engine.handle(CHAT, "/sources hh monster") == [messages.SOURCES_USAGE]
        assert engine.handle(CHAT, "/sources") == [messages.SOURCES_USAGE]
        assert filter_store.get(CHAT).sources == set(Source)

    def test_toggle_source(self, engine, filter_store):
        engine.handle(CHAT, "/source linkedin")
        assert Source.LINKEDIN not in filter_store.get(CHAT).sources

        engine.handle(CHAT, "/source LinkedIn")
        assert Source.LINKEDIN in filter_store.get(CHAT).sources

        assert engine.handle(CHAT, "/source hh habr") == [messages.SOURCE_USAGE]

    def test_currency(self, engine, filter_store):
        engine.handle(CHAT, "/set_min_salary 3000")

        reply = engine.handle(CHAT, "/currency usd")[0]

        assert filter_store.get(CHAT).salary_currency == "USD"
        assert "• Зарплата: от 3000 USD" in reply
        assert engine.handle(CHAT, "/currency доллары") == [messages.INVALID_CURRENCY]

    def test_reset(self, engine, filter_store):
        engine.handle(CHAT, "/set_city Казань")
        engine.handle(CHAT, "/clear_keywords")

        engine.handle(CHAT, "/reset")

        restored = filter_store.get(CHAT)
        assert restored.city is None
        assert restored.keywords == set(DEFAULT_KEYWORDS)

    def test_search_uses_stored_filter(self, engine, filter_store, search):
        filter_store.update_city(CHAT, "Казань")

        replies = engine.handle(CHAT, "/search")

        searched = search.call_args[0][0]
        assert searched.chat_id == CHAT
        assert searched.city == "Казань"
        assert "не найдено" in replies[0]

    def test_search_results(self, filter_store, session_store, make_posting):
        postings = [make_posting(id="hh_1"), make_posting(id="hh_2", title="Designer")]
        engine = DialogEngine(
            filter_store, session_store, search=lambda f: _result(f.chat_id, postings, total_matched=5)
        )

        replies = engine.handle(CHAT, "/search")

        assert len(replies) == 3
        assert "Найдено вакансий: 5" in replies[0]
        assert "показаны первые 2" in replies[0]
        assert "<b>Designer</b>" in replies[2]

    def test_chats_are_independent(self, engine, session_store):
        engine.handle(1, "/set_city")

        assert session_store.get_state(2) is DialogState.NONE
        engine.handle(2, "/filters")
        assert session_store.get_state(1) is DialogState.AWAITING_CITY


class TestBotService:
    """Tests for the BotService boundary."""

    def test_replies_sent_through_channel(self, engine):
        channel = RecordingChannel()
        service = BotService(engine, channel)

        service.handle_message(InboundMessage(chat_id=CHAT, text="/set_city"))

        assert channel.sent == [(CHAT, messages.PROMPT_CITY)]

    def test_unexpected_error_reported_and_session_reset(self, filter_store, session_store):
        failing_search = Mock(side_effect=RuntimeError("source exploded"))
        engine = DialogEngine(filter_store, session_store, search=failing_search)
        channel = RecordingChannel()
        service = BotService(engine, channel)
        session_store.set_state(CHAT, DialogState.NONE)

        replies = service.handle_message(InboundMessage(chat_id=CHAT, text="/search"))

        assert replies == ["❌ Произошла ошибка: source exploded\n"]
        assert channel.sent == [(CHAT, replies[0])]
        assert session_store.get_state(CHAT) is DialogState.NONE

    def test_error_in_awaiting_state_resets_dialog(self, engine, session_store):
        engine.filters = Mock()
        engine.filters.update_city.side_effect = RuntimeError("disk on fire")
        channel = RecordingChannel()
        service = BotService(engine, channel)
        session_store.set_state(CHAT, DialogState.AWAITING_CITY)

        service.handle_message(InboundMessage(chat_id=CHAT, text="Казань"))

        assert session_store.get_state(CHAT) is DialogState.NONE
        assert "disk on fire" in channel.sent[0][1]
