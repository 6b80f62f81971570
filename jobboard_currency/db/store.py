"""Persisted key/value stores backing the rate cache and currency preference.

Two implementations share the ``KeyValueStore`` protocol:

- ``SqliteKeyValueStore``: rows in the ``metadata`` table, survives restarts.
- ``MemoryKeyValueStore``: dict-backed, used by tests and ephemeral sessions.

Writes are last-write-wins; callers that need two keys to agree must treat a
mismatched pair as absent.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol

from .schema import BASIC_UTC_NOW, init_db


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def get_many(self, keys: Iterable[str]) -> Dict[str, Optional[str]]: ...

    def set(self, key: str, value: str) -> None: ...

    def set_many(self, values: Dict[str, str]) -> None: ...

    def delete(self, *keys: str) -> None: ...


class SqliteKeyValueStore:
    def __init__(self, db_path: Path):
        self.db_path = db_path
        init_db(db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def get(self, key: str) -> Optional[str]:
        return self.get_many([key])[key]

    def get_many(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        keys = list(keys)
        out: Dict[str, Optional[str]] = {k: None for k in keys}
        if not keys:
            return out
        placeholders = ",".join("?" for _ in keys)
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"SELECT key, value FROM metadata WHERE key IN ({placeholders})",
                keys,
            )
            for row in cur.fetchall():
                out[row["key"]] = row["value"]
        return out

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, values: Dict[str, str]) -> None:
        # single transaction so readers never see half of a pair
        with self._connect() as conn:
            conn.executemany(
                "INSERT INTO metadata(key,value) VALUES(?,?) ON CONFLICT(key) DO UPDATE SET "
                f"value=excluded.value, updated_at=({BASIC_UTC_NOW})",
                list(values.items()),
            )

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        placeholders = ",".join("?" for _ in keys)
        with self._connect() as conn:
            conn.execute(f"DELETE FROM metadata WHERE key IN ({placeholders})", keys)


class MemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def get_many(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        return {k: self._data.get(k) for k in keys}

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def set_many(self, values: Dict[str, str]) -> None:
        self._data.update(values)

    def delete(self, *keys: str) -> None:
        for k in keys:
            self._data.pop(k, None)
