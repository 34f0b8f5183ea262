"""Per-user filter store with JSON persistence.

Filters live in memory keyed by chat id and are written wholesale to a JSON
file after every mutation:

    {"123456": {"chat_id": 123456, "min_salary": 150000, "keywords": [...], ...}}

A missing or unreadable file means "no filters yet", never a startup failure.
Read-modify-write sequences for one chat id are serialized by a per-chat lock;
stored Filter objects are replaced, never mutated in place, so the writer can
snapshot the whole mapping without holding every chat's lock.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Union

from pydantic import ValidationError

from vacancy_bot.domain.models import Filter, Source
from vacancy_bot.logging import get_logger

from .exceptions import StoreLoadError, StoreWriteError
from .locks import KeyedLocks

logger = get_logger(__name__, component="store")


class FilterStore:
    """Key-value store of Filter objects keyed by chat id.

    Every accessor returns a detached copy; changes only take effect through
    save() or one of the mutators.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize FilterStore.

        Args:
            path: JSON file to load from and persist to. None keeps filters
                in memory only.
            logger_instance: Logger instance (defaults to module logger)
        """
        self.path = Path(path) if path else None
        self.logger = logger_instance or logger
        self._filters: Dict[int, Filter] = {}
        self._locks = KeyedLocks()
        self._write_lock = threading.Lock()

        if self.path is not None:
            self._filters = self._load()

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def get(self, chat_id: int) -> Filter:
        """Return the chat's filter, creating one with defaults on first access."""
        with self._locks(chat_id):
            return self._get_or_create(chat_id).model_copy(deep=True)

    def save(self, filter_: Filter) -> Filter:
        """Insert or replace a filter and persist the store."""
        with self._locks(filter_.chat_id):
            stored = filter_.model_copy(deep=True)
            self._filters[filter_.chat_id] = stored
            self._persist()
            return stored.model_copy(deep=True)

    def reset(self, chat_id: int) -> Filter:
        """Drop the chat's filter and recreate it with defaults."""
        with self._locks(chat_id):
            self._filters.pop(chat_id, None)
            fresh = self._get_or_create(chat_id)
            self._persist()

            self.logger.info(
                "Filter reset to defaults",
                extra={"event": "store.filter.reset", "chat_id": chat_id},
            )
            return fresh.model_copy(deep=True)

    def update(self, chat_id: int, mutate: Callable[[Filter], None]) -> Filter:
        """Apply ``mutate`` to a copy of the chat's filter, store and persist it.

        The whole read-modify-write runs under the chat's lock, so rapid
        consecutive edits from one user cannot lose updates.

        Returns:
            Copy of the updated filter
        """
        with self._locks(chat_id):
            updated = self._get_or_create(chat_id).model_copy(deep=True)
            mutate(updated)
            self._filters[chat_id] = updated
            self._persist()
            return updated.model_copy(deep=True)

    def chat_ids(self) -> list:
        return sorted(self._filters)

    def __contains__(self, chat_id: int) -> bool:
        return chat_id in self._filters

    def __len__(self) -> int:
        return len(self._filters)

    # ------------------------------------------------------------------
    # Field mutators
    # ------------------------------------------------------------------

    def update_min_salary(self, chat_id: int, min_salary: Optional[int]) -> Filter:
        return self.update(chat_id, lambda f: setattr(f, "min_salary", min_salary))

    def update_max_salary(self, chat_id: int, max_salary: Optional[int]) -> Filter:
        return self.update(chat_id, lambda f: setattr(f, "max_salary", max_salary))

    def update_city(self, chat_id: int, city: Optional[str]) -> Filter:
        """Set the city; an empty or blank value clears it."""
        value = city.strip() if city else ""
        return self.update(chat_id, lambda f: setattr(f, "city", value or None))

    def set_remote_only(self, chat_id: int, remote_only: bool) -> Filter:
        return self.update(chat_id, lambda f: setattr(f, "remote_only", remote_only))

    def set_exclude_agencies(self, chat_id: int, exclude: bool) -> Filter:
        return self.update(chat_id, lambda f: setattr(f, "exclude_agencies", exclude))

    def toggle_remote_only(self, chat_id: int) -> Filter:
        return self.update(chat_id, lambda f: setattr(f, "remote_only", not f.remote_only))

    def toggle_exclude_agencies(self, chat_id: int) -> Filter:
        return self.update(chat_id, lambda f: setattr(f, "exclude_agencies", not f.exclude_agencies))

    def set_min_experience(self, chat_id: int, years: Optional[int]) -> Filter:
        return self.update(chat_id, lambda f: setattr(f, "min_experience_years", years))

    def set_salary_currency(self, chat_id: int, currency: str) -> Filter:
        return self.update(chat_id, lambda f: setattr(f, "salary_currency", currency.strip().upper()))

    def add_keyword(self, chat_id: int, keyword: str) -> Filter:
        """Add a keyword (trimmed, lowercased); existing keywords are kept."""
        normalized = keyword.strip().lower()
        if not normalized:
            raise ValueError("keyword cannot be empty")
        return self.update(chat_id, lambda f: f.keywords.add(normalized))

    def remove_keyword(self, chat_id: int, keyword: str) -> Filter:
        normalized = keyword.strip().lower()
        return self.update(chat_id, lambda f: f.keywords.discard(normalized))

    def clear_keywords(self, chat_id: int) -> Filter:
        return self.update(chat_id, lambda f: f.keywords.clear())

    def toggle_source(self, chat_id: int, source: Union[Source, str]) -> Filter:
        """Enable the source if disabled, disable it if enabled."""
        source = Source(source)

        def _toggle(f: Filter) -> None:
            if source in f.sources:
                f.sources.discard(source)
            else:
                f.sources.add(source)

        return self.update(chat_id, _toggle)

    def set_sources(self, chat_id: int, sources: Iterable[Union[Source, str]]) -> Filter:
        selected = {Source(s) for s in sources}
        return self.update(chat_id, lambda f: setattr(f, "sources", selected))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _get_or_create(self, chat_id: int) -> Filter:
        existing = self._filters.get(chat_id)
        if existing is None:
            existing = Filter(chat_id=chat_id)
            self._filters[chat_id] = existing
        return existing

    def _persist(self) -> None:
        if self.path is None:
            return

        with self._write_lock:
            snapshot = dict(self._filters)
            try:
                self._write_file(snapshot)
            except StoreWriteError as e:
                self.logger.error(
                    f"Failed to persist filters: {e}",
                    extra={
                        "event": "store.filters.write_failed",
                        "path": str(self.path),
                        "filter_count": len(snapshot),
                    },
                )

    def _write_file(self, filters: Dict[int, Filter]) -> None:
        payload = {str(chat_id): serialize_filter(f) for chat_id, f in filters.items()}

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(payload, fh, ensure_ascii=False, indent=2, sort_keys=True)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StoreWriteError(f"Cannot write {self.path}: {e}") from e

        self.logger.debug(
            "Filters persisted",
            extra={
                "event": "store.filters.persisted",
                "path": str(self.path),
                "filter_count": len(payload),
            },
        )

    def _load(self) -> Dict[int, Filter]:
        """Load persisted filters; any failure yields an empty store."""
        try:
            raw = self._read_file()
        except StoreLoadError as e:
            self.logger.warning(
                f"Starting with no filters: {e}",
                extra={"event": "store.filters.load_failed", "path": str(self.path)},
            )
            return {}

        filters: Dict[int, Filter] = {}
        for key, record in raw.items():
            try:
                chat_id = int(key)
                if not isinstance(record, dict):
                    raise ValueError(f"expected an object, got {type(record).__name__}")
                filters[chat_id] = Filter.model_validate({**record, "chat_id": chat_id})
            except (ValueError, ValidationError) as e:
                self.logger.warning(
                    f"Skipping invalid filter record {key!r}: {e}",
                    extra={"event": "store.filters.record_skipped", "record_key": key},
                )

        self.logger.info(
            "Filters loaded",
            extra={
                "event": "store.filters.loaded",
                "path": str(self.path),
                "filter_count": len(filters),
            },
        )
        return filters

    def _read_file(self) -> dict:
        if not self.path.exists():
            raise StoreLoadError(f"{self.path} does not exist")

        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            raise StoreLoadError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreLoadError(f"{self.path} does not contain a JSON object")
        return data


def serialize_filter(filter_: Filter) -> dict:
    """JSON-ready dict with sets written as sorted lists."""
    data = filter_.model_dump(mode="json")
    data["keywords"] = sorted(filter_.keywords)
    data["sources"] = sorted(s.value for s in filter_.sources)
    return data
