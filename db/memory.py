"""
db/memory.py
------------
In-process store used when STORE_BACKEND=memory and by the test suite.

Records are deep-copied on the way in and out so callers can never mutate
stored state behind the repository's back. One re-entrant lock guards every
table, which makes each repository method atomic with respect to the others.
"""

import copy
import threading
from contextlib import contextmanager
from typing import Any, Iterator

from utils.logger import get_logger

logger = get_logger(__name__)

TABLES = (
    "accounts",
    "transactions",
    "goals",
    "reminders",
    "categories",
    "settings",
    "push_subscriptions",
)


class MemoryStore:
    """Dict-of-dicts keyed by table name, then record key."""

    def __init__(self):
        self._tables: dict[str, dict[str, Any]] = {name: {} for name in TABLES}
        self._lock = threading.RLock()
        logger.info("In-memory store initialized.")

    @contextmanager
    def locked(self) -> Iterator[dict[str, dict[str, Any]]]:
        """Hold the store lock and expose the raw tables (no copying)."""
        with self._lock:
            yield self._tables

    def get(self, table: str, key: str) -> Any:
        with self._lock:
            record = self._tables[table].get(key)
            return copy.deepcopy(record)

    def put(self, table: str, key: str, record: Any) -> None:
        with self._lock:
            self._tables[table][key] = copy.deepcopy(record)

    def delete(self, table: str, key: str) -> bool:
        with self._lock:
            return self._tables[table].pop(key, None) is not None

    def all(self, table: str) -> list[Any]:
        """Snapshot of every record in insertion order."""
        with self._lock:
            return [copy.deepcopy(r) for r in self._tables[table].values()]
