"""SQLite-backed key-value store for favorites and cached doc searches.

Values are JSON documents addressed by a namespace plus a key path such
as ``("favorites", [user_id, favorite_id])``. ``list`` returns every value
whose key path starts with a given prefix, ordered by key.

Entries may carry a TTL; expired entries are invisible to readers and
purged periodically.
"""

from __future__ import annotations

import json
import sqlite3
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from loguru import logger

# Joins key path parts; cannot appear in ids or user ids
_KEY_SEP = "\x1f"

# Purge expired entries every N writes
_PURGE_INTERVAL = 50


def _encode_key(key_path: Sequence[str]) -> str:
    parts = [str(part) for part in key_path]
    if not parts:
        raise ValueError("key path must not be empty")
    if any(_KEY_SEP in part for part in parts):
        raise ValueError("key path parts must not contain control separators")
    return _KEY_SEP.join(parts)


class KVStore:
    """Namespaced JSON key-value store."""

    def __init__(self, db_path: Path):
        self._db_path = db_path
        self._write_count = 0

        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode = WAL")
        self._conn.execute("PRAGMA synchronous = NORMAL")
        self._conn.execute("PRAGMA busy_timeout = 5000")

        self._create_tables()
        logger.debug(f"KVStore initialized at {db_path}")

    def _create_tables(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                namespace TEXT NOT NULL,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                created_at REAL NOT NULL,
                expires_at REAL,
                PRIMARY KEY (namespace, key)
            )
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_kv_store_expires
            ON kv_store(expires_at)
        """)
        self._conn.commit()

    def put(
        self,
        namespace: str,
        key_path: Sequence[str],
        value: Any,
        ttl: float | None = None,
    ) -> None:
        """Store ``value`` (JSON-serializable), replacing any previous one."""
        key = _encode_key(key_path)
        now = time.time()
        expires_at = now + ttl if ttl is not None else None

        self._conn.execute(
            """INSERT OR REPLACE INTO kv_store
               (namespace, key, value, created_at, expires_at)
               VALUES (?, ?, ?, ?, ?)""",
            (namespace, key, json.dumps(value, ensure_ascii=False), now, expires_at),
        )
        self._conn.commit()
        logger.debug(f"Store PUT: {namespace}/{key.replace(_KEY_SEP, '/')}")

        self._write_count += 1
        if self._write_count >= _PURGE_INTERVAL:
            self._purge_expired()
            self._write_count = 0

    def get(self, namespace: str, key_path: Sequence[str]) -> Any | None:
        """Return the stored value, or None if absent or expired."""
        key = _encode_key(key_path)
        row = self._conn.execute(
            """SELECT value FROM kv_store
               WHERE namespace = ? AND key = ?
               AND (expires_at IS NULL OR expires_at > ?)""",
            (namespace, key, time.time()),
        ).fetchone()
        if row is None:
            return None
        return json.loads(row["value"])

    def list(self, namespace: str, prefix: Sequence[str] = ()) -> list[Any]:
        """Return values whose key path starts with ``prefix``, ordered by key."""
        now = time.time()
        if prefix:
            key_prefix = _encode_key(prefix) + _KEY_SEP
            rows = self._conn.execute(
                """SELECT value FROM kv_store
                   WHERE namespace = ? AND substr(key, 1, ?) = ?
                   AND (expires_at IS NULL OR expires_at > ?)
                   ORDER BY key""",
                (namespace, len(key_prefix), key_prefix, now),
            ).fetchall()
        else:
            rows = self._conn.execute(
                """SELECT value FROM kv_store
                   WHERE namespace = ?
                   AND (expires_at IS NULL OR expires_at > ?)
                   ORDER BY key""",
                (namespace, now),
            ).fetchall()
        return [json.loads(row["value"]) for row in rows]

    def delete(self, namespace: str, key_path: Sequence[str]) -> bool:
        """Delete an entry. Returns True if something was removed."""
        key = _encode_key(key_path)
        cursor = self._conn.execute(
            "DELETE FROM kv_store WHERE namespace = ? AND key = ?",
            (namespace, key),
        )
        self._conn.commit()
        return cursor.rowcount > 0

    def _purge_expired(self) -> None:
        """Remove expired entries."""
        cursor = self._conn.execute(
            "DELETE FROM kv_store WHERE expires_at IS NOT NULL AND expires_at <= ?",
            (time.time(),),
        )
        if cursor.rowcount > 0:
            self._conn.commit()
            logger.debug(f"Purged {cursor.rowcount} expired store entries")

    def close(self) -> None:
        """Close database connection."""
        try:
            self._conn.close()
        except sqlite3.Error:
            pass
