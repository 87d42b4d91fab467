"""Key-value persistence used by every CRM collection.

Each collection is stored as one JSON document under a single key. Services
read the whole document, mutate it in memory and write it back. The backends
below only differ in where the raw JSON text lives.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar

import psycopg
from psycopg import Connection
from psycopg.rows import dict_row
from pydantic import TypeAdapter

from .config import DatabaseConfig, Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


def _validate_key(key: str) -> str:
    if not isinstance(key, str) or not _KEY_PATTERN.match(key):
        raise ValueError(f"Storage key '{key}' may only contain letters, digits, dot, underscore or hyphen.")
    return key


class KeyValueStore(ABC):
    """Minimal local-storage style API over raw JSON strings."""

    @abstractmethod
    def get_raw(self, key: str) -> Optional[str]:
        """Return the stored text for ``key`` or None when missing."""

    @abstractmethod
    def set_raw(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Delete ``key``; return True when something was removed."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Return every stored key in sorted order."""

    def clear(self) -> None:
        for key in self.keys():
            self.remove(key)

    def contains(self, key: str) -> bool:
        return self.get_raw(key) is not None

    def get_item(self, key: str, adapter: TypeAdapter[T]) -> Optional[T]:
        """Decode the value under ``key`` with ``adapter``.

        Raises ``pydantic.ValidationError`` when the stored text is not valid
        JSON or does not match the expected shape; callers decide how to
        recover.
        """
        raw = self.get_raw(key)
        if raw is None:
            return None
        return adapter.validate_json(raw)

    def set_item(self, key: str, value: T, adapter: TypeAdapter[T]) -> None:
        self.set_raw(key, adapter.dump_json(value).decode("utf-8"))


class MemoryStore(KeyValueStore):
    """Process-local store, equivalent to a fresh browser profile."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get_raw(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_raw(self, key: str, value: str) -> None:
        logger.debug("memory store write key=%s bytes=%d", key, len(value))
        self._data[key] = value

    def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> List[str]:
        return sorted(self._data)

    def clear(self) -> None:
        self._data.clear()


class FileStore(KeyValueStore):
    """Store each key as ``<key>.json`` inside a directory."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        return self._root / f"{_validate_key(key)}.json"

    def get_raw(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_raw(self, key: str, value: str) -> None:
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("file store write %s (%d bytes)", path, len(value))

    def remove(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def keys(self) -> List[str]:
        return sorted(path.stem for path in self._root.glob("*.json"))


class PostgresStore(KeyValueStore):
    """Postgres-backed key-value table (one row per storage key)."""

    _TABLE = "local_storage"

    def __init__(self, config: Optional[DatabaseConfig] = None) -> None:
        self._config = config or DatabaseConfig.from_env()
        self._conn: Connection = psycopg.connect(
            host=self._config.host,
            port=self._config.port,
            user=self._config.user,
            password=self._config.password,
            dbname=self._config.dbname,
            sslmode=self._config.sslmode,
            connect_timeout=self._config.connect_timeout,
            row_factory=dict_row,
        )
        self._conn.autocommit = True
        self.ensure_schema()

    def ensure_schema(self) -> None:
        self._execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self._TABLE} (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            );
            """,
            {},
        )

    def close(self) -> None:
        """Close the underlying database connection."""
        self._conn.close()

    # ------------------------------------------------------------------
    # SQL helpers
    # ------------------------------------------------------------------

    def _fetchone(self, query: str, params: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        with self._conn.cursor() as cur:
            cur.execute(query, params)
            return cur.fetchone()

    def _fetchall(self, query: str, params: Optional[Mapping[str, Any]] = None) -> Sequence[Dict[str, Any]]:
        with self._conn.cursor() as cur:
            cur.execute(query, params or {})
            return cur.fetchall()

    def _execute(self, query: str, params: Mapping[str, Any]) -> int:
        with self._conn.cursor() as cur:
            cur.execute(query, params)
            return cur.rowcount

    # ------------------------------------------------------------------
    # KeyValueStore API
    # ------------------------------------------------------------------

    def get_raw(self, key: str) -> Optional[str]:
        record = self._fetchone(f"SELECT value FROM {self._TABLE} WHERE key = %(key)s;", {"key": key})
        return record["value"] if record else None

    def set_raw(self, key: str, value: str) -> None:
        self._execute(
            f"""
            INSERT INTO {self._TABLE} (key, value, updated_at)
            VALUES (%(key)s, %(value)s, NOW())
            ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, updated_at = EXCLUDED.updated_at;
            """,
            {"key": key, "value": value},
        )

    def remove(self, key: str) -> bool:
        return self._execute(f"DELETE FROM {self._TABLE} WHERE key = %(key)s;", {"key": key}) > 0

    def keys(self) -> List[str]:
        rows = self._fetchall(f"SELECT key FROM {self._TABLE} ORDER BY key;")
        return [row["key"] for row in rows]

    def clear(self) -> None:
        self._execute(f"DELETE FROM {self._TABLE};", {})


def create_store(settings: Settings) -> KeyValueStore:
    """Instantiate the backend selected by ``settings.storage_backend``."""
    if settings.storage_backend == "file":
        logger.info("Using file storage at %s", settings.storage_path)
        return FileStore(settings.storage_path)
    if settings.storage_backend == "postgres":
        logger.info("Using Postgres storage at %s:%s/%s", settings.database.host, settings.database.port, settings.database.dbname)
        return PostgresStore(settings.database)
    return MemoryStore()


# ----------------------------------------------------------------------
# Backup and restore
# ----------------------------------------------------------------------


def export_snapshot(store: KeyValueStore, keys: Optional[Iterable[str]] = None) -> Dict[str, str]:
    """Capture the raw value of every (or the selected) key."""
    selected = list(keys) if keys is not None else store.keys()
    snapshot: Dict[str, str] = {}
    for key in selected:
        raw = store.get_raw(key)
        if raw is not None:
            snapshot[key] = raw
    logger.info("Exported snapshot with %d keys", len(snapshot))
    return snapshot


def restore_snapshot(store: KeyValueStore, snapshot: Mapping[str, str], *, clear: bool = True) -> int:
    """Write ``snapshot`` back into ``store``; returns the number of keys restored."""
    if clear:
        store.clear()
    for key, raw in snapshot.items():
        store.set_raw(key, raw)
    logger.info("Restored %d keys from snapshot (clear=%s)", len(snapshot), clear)
    return len(snapshot)
