"""Shared repository plumbing for collection-per-key storage."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from ..models.common import CRMBaseModel, _create_id, utcnow
from ..storage import KeyValueStore

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=CRMBaseModel)

# Fields compared verbatim during search instead of case-insensitively.
_CASE_SENSITIVE_FIELDS = {"phone"}


def _enum_value(value: Any) -> Any:
    """Return the raw value of an enum member, leaving other inputs untouched."""
    return getattr(value, "value", value)


def count_by(items: Iterable[Any], key: Callable[[Any], Any]) -> Dict[str, int]:
    """Group ``items`` by ``key`` and count each bucket, skipping empty keys."""
    counts: Counter = Counter()
    for item in items:
        bucket = _enum_value(key(item))
        if bucket is None or bucket == "":
            continue
        counts[bucket] += 1
    return dict(counts)


def year_sequence_number(prefix: str, timestamps: Iterable[datetime], now: Optional[datetime] = None) -> str:
    """Build ``PREFIX-YYYY-NNNN`` where NNNN counts this year's records plus one."""
    now = now or utcnow()
    count = sum(1 for ts in timestamps if ts.year == now.year)
    return f"{prefix}-{now.year}-{count + 1:04d}"


class CollectionService(Generic[ModelT]):
    """Repository over a list of models serialized under one storage key.

    Every call reloads the collection; every mutation rewrites it. When the
    collection is missing or empty and seeding is enabled, the sample data is
    written first so a fresh store is never blank.
    """

    storage_key: str = ""
    model: Type[ModelT]
    entity_label: str = "Entity"

    def __init__(self, store: KeyValueStore, *, seed_sample_data: bool = True) -> None:
        self._store = store
        self._seed_sample_data = seed_sample_data
        self._adapter = TypeAdapter(List[self.model])

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def _sample_data(self) -> List[ModelT]:
        return []

    def _after_seed(self, items: List[ModelT]) -> None:
        """Hook for services whose sample data spans more than one collection."""

    def _fallback(self) -> List[ModelT]:
        return self._sample_data() if self._seed_sample_data else []

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    def _load(self) -> List[ModelT]:
        try:
            items = self._store.get_item(self.storage_key, self._adapter)
        except ValidationError as exc:
            logger.warning(
                "Stored '%s' collection is unreadable (%d errors); using fallback data.",
                self.storage_key,
                exc.error_count(),
            )
            return self._fallback()
        if items:
            return items
        if not self._seed_sample_data:
            return []
        seeded = self._sample_data()
        if seeded:
            self._save(seeded)
            self._after_seed(seeded)
            logger.info("Seeded %d sample records into '%s'.", len(seeded), self.storage_key)
        return seeded

    def _save(self, items: Sequence[ModelT]) -> None:
        self._store.set_item(self.storage_key, list(items), self._adapter)
        logger.debug("Saved %d records to '%s'.", len(items), self.storage_key)

    def _not_found(self, entity_id: str) -> ValueError:
        return ValueError(f"{self.entity_label} not found with ID '{entity_id}'.")

    @staticmethod
    def _index_of(items: Sequence[ModelT], entity_id: str) -> Optional[int]:
        for index, item in enumerate(items):
            if item.id == entity_id:
                return index
        return None

    def _find(self, entity_id: str) -> Optional[ModelT]:
        for item in self._load():
            if item.id == entity_id:
                return item
        return None

    def _require(self, entity_id: str) -> ModelT:
        entity = self._find(entity_id)
        if entity is None:
            raise self._not_found(entity_id)
        return entity

    def _insert(self, entity: ModelT, *, stamp: Sequence[str] = ("created_at", "updated_at")) -> ModelT:
        """Give ``entity`` a fresh id and timestamps, then append it."""
        now = utcnow()
        entity.id = _create_id()
        for field_name in stamp:
            setattr(entity, field_name, now)
        items = self._load()
        items.append(entity)
        self._save(items)
        return entity

    def _replace(self, entity: ModelT, *, touch: bool = True) -> ModelT:
        items = self._load()
        index = self._index_of(items, entity.id)
        if index is None:
            raise self._not_found(entity.id)
        if touch:
            entity.updated_at = utcnow()
        items[index] = entity
        self._save(items)
        return entity

    def _remove(self, entity_id: str) -> bool:
        items = self._load()
        index = self._index_of(items, entity_id)
        if index is None:
            return False
        del items[index]
        self._save(items)
        return True

    def _remove_where(self, predicate: Callable[[ModelT], bool]) -> int:
        items = self._load()
        kept = [item for item in items if not predicate(item)]
        removed = len(items) - len(kept)
        if removed:
            self._save(kept)
        return removed

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _search(items: Iterable[ModelT], term: Optional[str], fields: Sequence[str]) -> List[ModelT]:
        """Substring match across ``fields``; blank terms match everything."""
        items = list(items)
        if term is None or term.strip() == "":
            return items
        needle = term.strip()
        lowered = needle.lower()
        results = []
        for item in items:
            for field_name in fields:
                value = getattr(item, field_name, None)
                if not isinstance(value, str) or not value:
                    continue
                if field_name in _CASE_SENSITIVE_FIELDS:
                    hit = needle in value
                else:
                    hit = lowered in value.lower()
                if hit:
                    results.append(item)
                    break
        return results

    @staticmethod
    def _filter(items: Iterable[ModelT], field_name: str, value: Any) -> List[ModelT]:
        expected = _enum_value(value)
        return [item for item in items if getattr(item, field_name) == expected]
