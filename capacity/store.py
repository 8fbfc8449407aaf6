"""
Tool: Key/Value Store
Purpose: Whole-value persistence for experiment state and signal loading

The analysis core never talks to a database directly. It reads and writes
whole JSON strings through a two-method contract, so tests can substitute an
in-memory fake and the app can plug in whatever the device offers.

Contract:
    get(key) -> str | None
    set(key, value) -> None

Implementations:
    MemoryStore: dict-backed, for tests and one-shot scripts
    SqliteStore: data/capacity.db, one row per key

Dependencies:
    - sqlite3 (stdlib)
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Iterable, Protocol

from capacity import DB_PATH
from capacity.logging_config import get_logger
from capacity.models import Signal

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process store. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SqliteStore:
    """SQLite-backed store with whole-value semantics."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = Path(db_path) if db_path else DB_PATH

    def get_connection(self) -> sqlite3.Connection:
        """Get database connection, creating the table if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row

        conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.commit()
        return conn

    def get(self, key: str) -> str | None:
        conn = self.get_connection()
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        conn = self.get_connection()
        try:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                    updated_at = excluded.updated_at
            """,
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()


def read_json(store: KeyValueStore, key: str, default: Any) -> Any:
    """Read a JSON value, treating missing or corrupt data as ``default``."""
    raw = store.get(key)
    if raw is None:
        return default
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(f"Corrupt value under {key}, treating as empty: {e}")
        return default
    if not isinstance(value, type(default)):
        logger.warning(f"Unexpected {type(value).__name__} under {key}, treating as empty")
        return default
    return value


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value))


# ─────────────────────────────────────────────────────────────────────────────
# Signal loading
# ─────────────────────────────────────────────────────────────────────────────


def parse_signals(entries: Iterable[Any]) -> list[Signal]:
    """Convert raw dicts to signals, skipping anything malformed."""
    signals = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping non-object signal entry: {entry!r}")
            continue
        try:
            signals.append(Signal.from_dict(entry))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Skipping malformed signal {entry!r}: {e}")
    return signals


def load_signals(path: Path) -> list[Signal]:
    """Load signals from a JSON array file. Unreadable files yield no signals."""
    try:
        with open(path) as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read signals from {path}: {e}")
        return []

    if isinstance(raw, dict):
        raw = raw.get("signals", [])
    if not isinstance(raw, list):
        logger.warning(f"Signals file {path} does not hold a list")
        return []
    return parse_signals(raw)


def load_signals_from_store(store: KeyValueStore, key: str = "@capacity:signals") -> list[Signal]:
    return parse_signals(read_json(store, key, []))


def save_signals_to_store(
    store: KeyValueStore, signals: Iterable[Signal], key: str = "@capacity:signals"
) -> None:
    write_json(store, key, [s.to_dict() for s in signals])
