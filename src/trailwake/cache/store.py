"""Key/value stores backing the TTL cache.

Two implementations share the same small interface:
- MemoryStore: dict-backed, used in tests and as a no-persistence fallback
- DuckDBStore: persistent single-table store in a DuckDB file
"""

import logging
import time
from pathlib import Path
from typing import Iterator, Optional, Protocol

import duckdb

from trailwake.config import DEFAULT_CACHE_PATH
from trailwake.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key VARCHAR PRIMARY KEY,
    value VARCHAR NOT NULL
)
"""


class KeyValueStore(Protocol):
    """String key/value store. Operations may raise StorageUnavailableError."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> Iterator[str]: ...


class MemoryStore:
    """In-process store with an optional byte quota.

    Args:
        max_bytes: Reject writes once keys plus values exceed this size
        disabled: Reject every operation, like storage turned off
    """

    def __init__(self, max_bytes: Optional[int] = None, disabled: bool = False):
        self._data: dict[str, str] = {}
        self.max_bytes = max_bytes
        self.disabled = disabled

    def _check_enabled(self) -> None:
        if self.disabled:
            raise StorageUnavailableError("storage is disabled")

    def _size_with(self, key: str, value: str) -> int:
        size = sum(len(k) + len(v) for k, v in self._data.items() if k != key)
        return size + len(key) + len(value)

    def get_item(self, key: str) -> Optional[str]:
        self._check_enabled()
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._check_enabled()
        if self.max_bytes is not None and self._size_with(key, value) > self.max_bytes:
            raise StorageUnavailableError("storage quota exceeded")
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._check_enabled()
        self._data.pop(key, None)

    def keys(self) -> Iterator[str]:
        self._check_enabled()
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)


class DuckDBStore:
    """Persistent key/value store in a DuckDB file.

    The connection is opened lazily and retried with backoff while another
    process holds the file lock. Any duckdb error is surfaced as
    StorageUnavailableError so the cache can degrade to a miss.

    Example:
        >>> store = DuckDBStore(Path("/tmp/trailwake.duckdb"))
        >>> store.set_item("k", "v")
        >>> store.get_item("k")
        'v'
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the store.

        Args:
            db_path: Path to DuckDB file. Created if it doesn't exist.
        """
        self.db_path = Path(db_path or DEFAULT_CACHE_PATH)
        self._conn = None

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        """Get database connection (lazy initialization with retry)."""
        if self._conn is None:
            self._conn = self._connect_with_retry()
            self._conn.execute(SCHEMA_SQL)
            logger.info(f"Cache store initialized at {self.db_path}")
        return self._conn

    def _connect_with_retry(self, max_retries: int = 3) -> duckdb.DuckDBPyConnection:
        """Connect to database with retry logic for lock handling."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(f"cannot create {self.db_path.parent}: {e}") from e

        last_error = None
        for attempt in range(max_retries):
            try:
                return duckdb.connect(str(self.db_path))
            except duckdb.IOException as e:
                last_error = e
                if "lock" in str(e).lower() and attempt < max_retries - 1:
                    wait_time = 0.5 * (2 ** attempt)
                    logger.warning(f"Cache store locked, retrying in {wait_time}s...")
                    time.sleep(wait_time)
                else:
                    break
            except duckdb.Error as e:
                last_error = e
                break
        raise StorageUnavailableError(f"cannot open {self.db_path}: {last_error}") from last_error

    def get_item(self, key: str) -> Optional[str]:
        try:
            row = self.conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", [key]
            ).fetchone()
        except duckdb.Error as e:
            raise StorageUnavailableError(str(e)) from e
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        try:
            self.conn.execute(
                """
                INSERT INTO kv_store (key, value) VALUES (?, ?)
                ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value
                """,
                [key, value],
            )
        except duckdb.Error as e:
            raise StorageUnavailableError(str(e)) from e

    def remove_item(self, key: str) -> None:
        try:
            self.conn.execute("DELETE FROM kv_store WHERE key = ?", [key])
        except duckdb.Error as e:
            raise StorageUnavailableError(str(e)) from e

    def keys(self) -> Iterator[str]:
        try:
            rows = self.conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        except duckdb.Error as e:
            raise StorageUnavailableError(str(e)) from e
        return iter([row[0] for row in rows])

    def get_stats(self) -> dict:
        """Get store statistics."""
        try:
            total = self.conn.execute("SELECT COUNT(*) FROM kv_store").fetchone()[0]
            stamps = self.conn.execute(
                "SELECT COUNT(*) FROM kv_store WHERE key LIKE '%:t'"
            ).fetchone()[0]
        except duckdb.Error as e:
            raise StorageUnavailableError(str(e)) from e
        return {
            "entry_count": stamps,
            "row_count": total,
            "db_path": str(self.db_path),
        }

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
