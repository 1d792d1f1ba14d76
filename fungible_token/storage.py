"""
Storage Backend Module

Provides the key-value storage interface the ledger is built on, with
implementations for in-memory (testing) and SQLite (persistence). All values
are stored as strings; token amounts are stored as decimal strings.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Union
from datetime import datetime, timezone
import re
import sqlite3
import threading
from pathlib import Path
from contextlib import contextmanager


_TABLE_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _check_table_name(table: str) -> str:
    """Table names are interpolated into SQL, so restrict them to identifiers"""
    if not _TABLE_NAME_PATTERN.fullmatch(table):
        raise ValueError(f"Invalid table name: {table!r}")
    return table


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    @abstractmethod
    def get(self, table: str, key: str) -> Optional[str]:
        """Return the value stored under key, or None"""
        pass

    @abstractmethod
    def set(self, table: str, key: str, value: str) -> None:
        """Store value under key, replacing any previous value"""
        pass

    @abstractmethod
    def exists(self, table: str, key: str) -> bool:
        """Check if a key exists"""
        pass

    @abstractmethod
    def keys(self, table: str) -> List[str]:
        """List all keys in a table"""
        pass

    @abstractmethod
    def count(self, table: str) -> int:
        """Count keys in table"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close storage connection"""
        pass

    def items(self, table: str) -> Dict[str, str]:
        """Return all key/value pairs of a table"""
        result = {}
        for key in self.keys(table):
            value = self.get(table, key)
            if value is not None:
                result[key] = value
        return result

    def begin_transaction(self) -> None:
        """Start a transaction (default no-op)"""
        pass

    def commit(self) -> None:
        """Commit current transaction (default no-op)"""
        pass

    def rollback(self) -> None:
        """Rollback current transaction (default no-op)"""
        pass

    @contextmanager
    def atomic(self):
        """
        Context manager for atomic operations

        Scopes nest: only the outermost one begins and commits or rolls back,
        so an error inside an inner scope undoes the whole outer unit.
        """
        depth = getattr(self, "_atomic_depth", 0)
        self._atomic_depth = depth + 1
        if depth == 0:
            self.begin_transaction()
        try:
            yield
        except Exception:
            if depth == 0:
                self.rollback()
            raise
        else:
            if depth == 0:
                self.commit()
        finally:
            self._atomic_depth = depth


class InMemoryStorage(StorageInterface):
    """In-memory storage implementation for testing"""

    def __init__(self):
        self._data: Dict[str, Dict[str, str]] = {}
        self._snapshot: Optional[Dict[str, Dict[str, str]]] = None
        self._lock = threading.RLock()

    def _ensure_table(self, table: str) -> Dict[str, str]:
        """Ensure table exists"""
        if table not in self._data:
            self._data[table] = {}
        return self._data[table]

    def get(self, table: str, key: str) -> Optional[str]:
        """Load a value from memory"""
        with self._lock:
            return self._ensure_table(table).get(key)

    def set(self, table: str, key: str, value: str) -> None:
        """Save a value to memory"""
        if not isinstance(value, str):
            raise TypeError(f"Storage values must be str, got {type(value).__name__}")
        with self._lock:
            self._ensure_table(table)[key] = value

    def exists(self, table: str, key: str) -> bool:
        """Check if a key exists"""
        with self._lock:
            return key in self._ensure_table(table)

    def keys(self, table: str) -> List[str]:
        """List all keys in a table"""
        with self._lock:
            return list(self._ensure_table(table).keys())

    def count(self, table: str) -> int:
        """Count keys in table"""
        with self._lock:
            return len(self._ensure_table(table))

    def begin_transaction(self) -> None:
        """Snapshot current data so rollback can restore it"""
        with self._lock:
            if self._snapshot is None:
                self._snapshot = {table: dict(rows) for table, rows in self._data.items()}

    def commit(self) -> None:
        """Discard the snapshot"""
        with self._lock:
            self._snapshot = None

    def rollback(self) -> None:
        """Restore data captured at begin_transaction"""
        with self._lock:
            if self._snapshot is not None:
                self._data = self._snapshot
                self._snapshot = None

    def close(self) -> None:
        """Close storage (no-op for in-memory)"""
        pass


class SQLiteStorage(StorageInterface):
    """SQLite storage implementation for persistence"""

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        # Set isolation_level to 'DEFERRED' to enable manual transaction control
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False, isolation_level='DEFERRED')
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._in_transaction = False
        self._known_tables: set = set()

        # Enable WAL mode for better concurrent access
        if self.db_path != ":memory:":
            with self._lock:
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")
                self._connection.commit()

    def _ensure_table(self, table: str) -> None:
        """Ensure table exists with key-value schema"""
        table = _check_table_name(table)
        if table in self._known_tables:
            return
        with self._lock:
            self._connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            # DDL must not commit a pending transaction's writes early
            if not self._in_transaction:
                self._connection.commit()
            self._known_tables.add(table)

    def get(self, table: str, key: str) -> Optional[str]:
        """Load a value from SQLite"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT value FROM {table} WHERE key = ?
            """, (key,))
            row = cursor.fetchone()
            if row:
                return row['value']
            return None

    def set(self, table: str, key: str, value: str) -> None:
        """Save a value to SQLite"""
        if not isinstance(value, str):
            raise TypeError(f"Storage values must be str, got {type(value).__name__}")
        with self._lock:
            self._ensure_table(table)
            now = datetime.now(timezone.utc).isoformat()

            # Use INSERT OR REPLACE to handle updates
            self._connection.execute(f"""
                INSERT OR REPLACE INTO {table} (key, value, updated_at)
                VALUES (?, ?, ?)
            """, (key, value, now))

            # Only commit if not in transaction
            if not self._in_transaction:
                self._connection.commit()

    def exists(self, table: str, key: str) -> bool:
        """Check if a key exists"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT 1 FROM {table} WHERE key = ? LIMIT 1
            """, (key,))
            return cursor.fetchone() is not None

    def keys(self, table: str) -> List[str]:
        """List all keys in a table"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT key FROM {table} ORDER BY key
            """)
            return [row['key'] for row in cursor.fetchall()]

    def items(self, table: str) -> Dict[str, str]:
        """Return all key/value pairs in one query"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT key, value FROM {table} ORDER BY key
            """)
            return {row['key']: row['value'] for row in cursor.fetchall()}

    def count(self, table: str) -> int:
        """Count keys in table"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT COUNT(*) as count FROM {table}
            """)
            return cursor.fetchone()['count']

    def begin_transaction(self) -> None:
        """Start a database transaction"""
        with self._lock:
            if not self._in_transaction:
                # SQLite with isolation_level='DEFERRED' automatically starts transactions
                # We just need to track the state
                self._in_transaction = True

    def commit(self) -> None:
        """Commit current transaction"""
        with self._lock:
            if self._in_transaction:
                self._connection.commit()
                self._in_transaction = False

    def rollback(self) -> None:
        """Rollback current transaction"""
        with self._lock:
            if self._in_transaction:
                self._connection.rollback()
                self._in_transaction = False
                # Tables created inside the transaction are rolled back too
                self._known_tables.clear()

    def close(self) -> None:
        """Close SQLite connection"""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None


def create_storage(backend: str, database_path: Optional[str] = None) -> StorageInterface:
    """
    Build a storage backend by name

    Args:
        backend: "memory" or "sqlite"
        database_path: SQLite database file (":memory:" when omitted)

    Returns:
        Storage backend instance
    """
    if backend == "memory":
        return InMemoryStorage()
    if backend == "sqlite":
        return SQLiteStorage(database_path or ":memory:")
    raise ValueError(f"Unknown storage backend: {backend}")
