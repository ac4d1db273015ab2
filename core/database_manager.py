import asyncio
import sqlite3
import logging
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from core.exceptions import StoreError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Backing interface for the memory store: string values with a TTL"""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def put(self, key: str, value: str, expiration_ttl: Optional[int] = None) -> None:
        pass


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock or time.time
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at is not None and self.clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def put(self, key: str, value: str, expiration_ttl: Optional[int] = None) -> None:
        expires_at = self.clock() + expiration_ttl if expiration_ttl else None
        self._data[key] = (value, expires_at)


class SQLiteKeyValueStore(KeyValueStore):
    def __init__(self, db_path: str, clock: Optional[Callable[[], float]] = None):
        self.db_path = Path(db_path)
        self.clock = clock or time.time
        self.lock = threading.Lock()
        self._init_database()

    def _init_database(self):
        """Create the key-value table if it doesn't exist"""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute('''
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        expires_at REAL
                    )
                ''')
                conn.commit()
            finally:
                conn.close()
            logger.info(f"Initialized key-value store at {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Error initializing key-value store: {str(e)}")
            raise StoreError(f"Could not initialize {self.db_path}: {e}") from e

    def _get(self, key: str) -> Optional[str]:
        with self.lock:
            conn = sqlite3.connect(self.db_path)
            try:
                row = conn.execute(
                    'SELECT value FROM kv_store WHERE key = ? AND (expires_at IS NULL OR expires_at > ?)',
                    (key, self.clock())
                ).fetchone()
                return row[0] if row else None
            except sqlite3.Error as e:
                raise StoreError(f"Read failed for {key}: {e}") from e
            finally:
                conn.close()

    def _put(self, key: str, value: str, expiration_ttl: Optional[int]) -> None:
        expires_at = self.clock() + expiration_ttl if expiration_ttl else None
        with self.lock:
            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute(
                    'INSERT OR REPLACE INTO kv_store (key, value, expires_at) VALUES (?, ?, ?)',
                    (key, value, expires_at)
                )
                conn.commit()
            except sqlite3.Error as e:
                raise StoreError(f"Write failed for {key}: {e}") from e
            finally:
                conn.close()

    def purge_expired(self) -> int:
        """Delete expired rows and return how many were removed"""
        with self.lock:
            conn = sqlite3.connect(self.db_path)
            try:
                cursor = conn.execute(
                    'DELETE FROM kv_store WHERE expires_at IS NOT NULL AND expires_at <= ?',
                    (self.clock(),)
                )
                conn.commit()
                removed = cursor.rowcount
            finally:
                conn.close()

        if removed:
            logger.info(f"Purged {removed} expired memory records")
        return removed

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get, key)

    async def put(self, key: str, value: str, expiration_ttl: Optional[int] = None) -> None:
        await asyncio.to_thread(self._put, key, value, expiration_ttl)
