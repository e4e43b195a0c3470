# =============================================================================
# tracker_core/offline/local_cache.py
# Per-user Local Cache (SQLite key-value store)
# =============================================================================
"""
LocalCache - durable, per-record-type cache of each user's records.

Storage layout:
- one SQLite table per namespace ("entries", "shifts")
- one row per store key holding the whole collection-map as JSON:
  {"<user id>": [record, ...], ...}

Features:
- Async API (blocking SQLite work runs in a worker thread)
- Read-only migration of the legacy flat-list format
- Atomic read-modify-write under a write lock (BEGIN IMMEDIATE)
- Plain, JSON-safe values in and out of the cache
"""

from __future__ import annotations
import asyncio
import json
import re
import sqlite3
from contextlib import contextmanager
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from tracker_core.config import DEFAULT_DATA_DIR
from tracker_core.errors import LocalStorageError
from tracker_core.logging import get_logger

logger = get_logger(__name__)

ENTRIES_STORE_KEY = "time-tracker-entries-v2"
SHIFTS_STORE_KEY = "time-tracker-shifts-v1"


def _json_default(obj: Any) -> Any:
    """Flatten records and rich values into JSON types."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def to_plain(records: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Deep-clone records into plain dicts/lists.

    The round trip through JSON also breaks any aliasing with the caller's
    objects, so later in-memory mutations never leak into a stored value.
    """
    return json.loads(json.dumps(list(records), default=_json_default))


class LocalCache:
    """
    Asynchronous key-value cache holding one collection-map per namespace.

    Usage:
        cache = LocalCache("entries", ENTRIES_STORE_KEY, db_path)
        records = await cache.load("user-1")
        await cache.persist(records, "user-1")
        await cache.clear("user-1")
    """

    DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "time-tracker.db"

    TABLE_SCHEMA = """
        CREATE TABLE IF NOT EXISTS {table} (
            key TEXT PRIMARY KEY,
            value TEXT,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """

    _NAMESPACE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

    def __init__(self, namespace: str, store_key: str, db_path: Optional[Path] = None):
        """
        Initialize the cache.

        Args:
            namespace: Storage namespace, used as the table name
            store_key: Key of the single collection-map value
            db_path: Path to the SQLite file
        """
        if not self._NAMESPACE_PATTERN.match(namespace):
            raise ValueError(f"Invalid cache namespace: {namespace!r}")

        self.namespace = namespace
        self.store_key = store_key
        self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
        self._schema_ready = False
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Ensure database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    # =========================================================================
    # SQLITE PLUMBING (runs in worker threads)
    # =========================================================================

    def _connect(self) -> sqlite3.Connection:
        # Autocommit mode; transactions are opened explicitly below.
        conn = sqlite3.connect(str(self.db_path), timeout=30, isolation_level=None)
        if not self._schema_ready:
            conn.execute(self.TABLE_SCHEMA.format(table=self.namespace))
            self._schema_ready = True
        return conn

    @contextmanager
    def _transaction(self, immediate: bool = False) -> Iterator[sqlite3.Connection]:
        """
        One transaction per cache operation.

        immediate=True takes the database write lock up front, so a whole
        read-modify-write of the collection-map is serialized against every
        other writer of the file.
        """
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            yield conn
            conn.execute("COMMIT")
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def _read_value(self, conn: sqlite3.Connection) -> Any:
        row = conn.execute(
            f"SELECT value FROM {self.namespace} WHERE key = ?",
            [self.store_key]
        ).fetchone()
        if row is None or row[0] is None:
            return None
        return json.loads(row[0])

    def _write_value(self, conn: sqlite3.Connection, value: Any) -> None:
        conn.execute(
            f"""
            INSERT OR REPLACE INTO {self.namespace} (key, value, updated_at)
            VALUES (?, ?, ?)
            """,
            [self.store_key, json.dumps(value), datetime.now().isoformat()]
        )

    @staticmethod
    def _partition_legacy(saved: List[Any]) -> Dict[str, List[Dict[str, Any]]]:
        """
        Convert the legacy flat list into map form keyed by owner.

        Ownerless legacy records have no key to go under; they stay visible
        to a user only through that user's own loaded list.
        """
        collection: Dict[str, List[Dict[str, Any]]] = {}
        for record in saved:
            if isinstance(record, dict) and record.get("userId"):
                collection.setdefault(str(record["userId"]), []).append(record)
        return collection

    def _load_sync(self, user_id: Optional[str]) -> List[Dict[str, Any]]:
        with self._transaction() as conn:
            saved = self._read_value(conn)

        if isinstance(saved, list):
            # Legacy flat list; filtered on read, never written back here
            return [
                record for record in saved
                if isinstance(record, dict)
                and (not record.get("userId") or record.get("userId") == user_id)
            ]

        if isinstance(saved, dict):
            return list(saved.get(user_id) or [])

        return []

    def _persist_sync(self, records: List[Dict[str, Any]], user_id: str) -> None:
        with self._transaction(immediate=True) as conn:
            saved = self._read_value(conn)

            if isinstance(saved, dict):
                collection = saved
            elif isinstance(saved, list):
                logger.info(f"Converting legacy {self.namespace} cache to per-user map")
                collection = self._partition_legacy(saved)
            else:
                collection = {}

            collection[user_id] = records
            self._write_value(conn, collection)

    def _clear_sync(self, user_id: str) -> bool:
        with self._transaction(immediate=True) as conn:
            saved = self._read_value(conn)
            if isinstance(saved, dict) and user_id in saved:
                del saved[user_id]
                self._write_value(conn, saved)
                return True
        return False

    async def _run(self, operation: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except (sqlite3.Error, OSError, TypeError, ValueError) as e:
            raise LocalStorageError(
                f"Local {self.namespace} cache {operation} failed: {e}",
                namespace=self.namespace,
                operation=operation,
            ) from e

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def load(self, user_id: Optional[str]) -> List[Dict[str, Any]]:
        """
        Load a user's records.

        Returns:
            Plain record dicts in display order ([] when nothing is stored)
        """
        return await self._run("load", self._load_sync, user_id)

    async def persist(self, records: Iterable[Any], user_id: Optional[str]) -> None:
        """
        Replace a user's stored list. No-op without a user id.

        Raises:
            LocalStorageError: when serialization or the write fails; the
                stored value is left as it was
        """
        if not user_id:
            return

        try:
            plain = to_plain(records)
        except (TypeError, ValueError) as e:
            raise LocalStorageError(
                f"Records for the {self.namespace} cache are not serializable: {e}",
                namespace=self.namespace,
                operation="persist",
            ) from e

        await self._run("persist", self._persist_sync, plain, user_id)
        logger.debug(f"Persisted {len(plain)} {self.namespace} for user {user_id}")

    async def clear(self, user_id: Optional[str]) -> None:
        """Remove a user's stored list. No-op without a user id."""
        if not user_id:
            return

        removed = await self._run("clear", self._clear_sync, user_id)
        if removed:
            logger.info(f"Cleared cached {self.namespace} for user {user_id}")
