"""Unit tests for FilterStore and DialogSessionStore."""

import json
import threading

import pytest

from vacancy_bot.domain.models import DEFAULT_KEYWORDS, DialogState, Filter, Source
from vacancy_bot.store import DialogSessionStore, FilterStore
from vacancy_bot.store.filter_store import serialize_filter
from vacancy_bot.store.locks import KeyedLocks


@pytest.fixture
def filters_path(tmp_path):
    return tmp_path / "data" / "user_filters.json"


class TestFilterStoreBasics:
    """get/save/reset and detached copies."""

    def test_get_creates_defaults(self, filter_store):
        filter_ = filter_store.get(42)

        assert filter_ == Filter(chat_id=42)
        assert 42 in filter_store
        assert len(filter_store) == 1

    def test_get_returns_detached_copy(self, filter_store):
        filter_ = filter_store.get(42)
        filter_.keywords.add("python")
        filter_.min_salary = 1

        stored = filter_store.get(42)
        assert "python" not in stored.keywords
        assert stored.min_salary is None

    def test_save_upserts(self, filter_store):
        filter_store.save(Filter(chat_id=7, city="Казань"))

        assert filter_store.get(7).city == "Казань"

    def test_reset_restores_defaults(self, filter_store):
        filter_store.update_min_salary(1, 100000)
        filter_store.clear_keywords(1)

        reset = filter_store.reset(1)

        assert reset.min_salary is None
        assert reset.keywords == set(DEFAULT_KEYWORDS)

    def test_chat_ids_sorted(self, filter_store):
        for chat_id in (3, 1, 2):
            filter_store.get(chat_id)

        assert filter_store.chat_ids() == [1, 2, 3]


class TestFilterStoreMutators:
    def test_salary_bounds(self, filter_store):
        filter_store.update_min_salary(1, 150000)
        updated = filter_store.update_max_salary(1, 300000)

        assert (updated.min_salary, updated.max_salary) == (150000, 300000)

    def test_update_city_trims(self, filter_store):
        assert filter_store.update_city(1, "  Казань ").city == "Казань"

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_update_city_empty_clears(self, filter_store, value):
        filter_store.update_city(1, "Казань")

        assert filter_store.update_city(1, value).city is None

    def test_add_keyword_normalizes(self, filter_store):
        updated = filter_store.add_keyword(1, "  Python ")

        assert "python" in updated.keywords
        assert set(DEFAULT_KEYWORDS) <= updated.keywords

    def test_add_empty_keyword_rejected(self, filter_store):
        with pytest.raises(ValueError):
            filter_store.add_keyword(1, "   ")

    def test_remove_and_clear_keywords(self, filter_store):
        assert "менеджер" not in filter_store.remove_keyword(1, "Менеджер").keywords
        assert filter_store.clear_keywords(1).keywords == set()

    def test_flags(self, filter_store):
        assert filter_store.set_remote_only(1, True).remote_only is True
        assert filter_store.set_exclude_agencies(1, True).exclude_agencies is True
        assert filter_store.toggle_remote_only(1).remote_only is False
        assert filter_store.toggle_exclude_agencies(1).exclude_agencies is False

    def test_experience_and_currency(self, filter_store):
        assert filter_store.set_min_experience(1, 3).min_experience_years == 3
        assert filter_store.set_salary_currency(1, " usd ").salary_currency == "USD"

    def test_toggle_source(self, filter_store):
        assert Source.HABR not in filter_store.toggle_source(1, "habr").sources
        assert Source.HABR in filter_store.toggle_source(1, Source.HABR).sources

    def test_set_sources(self, filter_store):
        assert filter_store.set_sources(1, ["hh"]).sources == {Source.HH}


class TestFilterStoreConcurrency:
    def test_concurrent_keyword_adds_are_not_lost(self, filter_store):
        """Rapid edits to one chat from many threads all land."""
        filter_store.clear_keywords(1)
        barrier = threading.Barrier(8)

        def add_many(worker):
            barrier.wait()
            for i in range(25):
                filter_store.add_keyword(1, f"kw-{worker}-{i}")

        threads = [threading.Thread(target=add_many, args=(w,)) for w in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(filter_store.get(1).keywords) == 8 * 25

    def test_concurrent_toggles_are_serialized(self, filter_store):
        threads = [threading.Thread(target=filter_store.toggle_remote_only, args=(1,)) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert filter_store.get(1).remote_only is False


class TestFilterStorePersistence:
    """JSON file persistence."""

    def test_mutation_persisted(self, filters_path):
        store = FilterStore(filters_path)
        store.update_city(5, "Казань")
        store.add_keyword(5, "python")

        data = json.loads(filters_path.read_text(encoding="utf-8"))
        assert data["5"]["city"] == "Казань"
        assert "python" in data["5"]["keywords"]
        assert data["5"]["keywords"] == sorted(data["5"]["keywords"])

    def test_reload(self, filters_path):
        FilterStore(filters_path).update_min_salary(5, 150000)

        reloaded = FilterStore(filters_path)

        assert 5 in reloaded
        assert reloaded.get(5).min_salary == 150000
        assert reloaded.get(5).sources == set(Source)

    def test_missing_file_means_empty(self, filters_path):
        store = FilterStore(filters_path)

        assert len(store) == 0
        assert not filters_path.exists()

    def test_corrupt_file_means_empty(self, filters_path):
        filters_path.parent.mkdir(parents=True)
        filters_path.write_text("{not json", encoding="utf-8")

        store = FilterStore(filters_path)

        assert len(store) == 0

    def test_non_object_file_means_empty(self, filters_path):
        filters_path.parent.mkdir(parents=True)
        filters_path.write_text("[1, 2, 3]", encoding="utf-8")

        assert len(FilterStore(filters_path)) == 0

    def test_invalid_records_skipped(self, filters_path):
        filters_path.parent.mkdir(parents=True)
        filters_path.write_text(
            json.dumps(
                {
                    "1": {"city": "Казань"},
                    "abc": {"city": "Пермь"},
                    "2": {"min_salary": "lots"},
                    "3": "not an object",
                }
            ),
            encoding="utf-8",
        )

        store = FilterStore(filters_path)

        assert store.chat_ids() == [1]
        assert store.get(1).city == "Казань"

    def test_write_failure_keeps_memory_state(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = FilterStore(blocker / "filters.json")

        updated = store.update_city(1, "Казань")

        assert updated.city == "Казань"
        assert store.get(1).city == "Казань"

    def test_serialize_filter(self):
        data = serialize_filter(Filter(chat_id=1, keywords={"b", "a"}, sources={Source.HABR, Source.HH}))

        assert data["keywords"] == ["a", "b"]
        assert data["sources"] == ["habr", "hh"]
        assert data["chat_id"] == 1


class TestDialogSessionStore:
    """Tests for DialogSessionStore."""

    def test_default_state_is_none(self, session_store):
        assert session_store.get_state(1) is DialogState.NONE
        assert session_store.active_count() == 0

    def test_set_state(self, session_store):
        session_store.set_state(1, DialogState.AWAITING_CITY)

        assert session_store.get_state(1) is DialogState.AWAITING_CITY
        assert session_store.get_state(2) is DialogState.NONE
        assert session_store.active_count() == 1

    def test_none_drops_session(self, session_store):
        session_store.set_state(1, DialogState.AWAITING_KEYWORD, temp_data="x")

        session = session_store.reset(1)

        assert session.state is DialogState.NONE
        assert session.temp_data is None
        assert session_store.active_count() == 0

    def test_get_returns_copy(self, session_store):
        session_store.set_state(1, DialogState.AWAITING_MIN_SALARY)

        session = session_store.get(1)
        session.state = DialogState.NONE

        assert session_store.get_state(1) is DialogState.AWAITING_MIN_SALARY

    def test_locked_is_reentrant(self, session_store):
        with session_store.locked(1):
            session_store.set_state(1, DialogState.AWAITING_CITY)
            assert session_store.get_state(1) is DialogState.AWAITING_CITY


class TestKeyedLocks:
    def test_same_key_same_lock(self):
        locks = KeyedLocks()

        assert locks(1) is locks(1)
        assert locks(1) is not locks(2)
        assert len(locks) == 2
