"""Record store contract and its storage backings."""

from __future__ import annotations

import logging

from .base import RecordStore
from .memory import InMemoryRecordStore
from .sqlite import SqliteRecordStore

logger = logging.getLogger(__name__)

BACKENDS = ("memory", "sqlite")


def build_record_store(backend: str, sqlite_path: str = "") -> RecordStore:
    """Create the store selected at process start; backings are never mixed at runtime."""
    if backend == "memory":
        logger.info("record store using volatile in-memory backing")
        return InMemoryRecordStore()
    if backend == "sqlite":
        if not sqlite_path:
            raise ValueError("sqlite backing requires a database path")
        logger.info("record store using sqlite backing at %s", sqlite_path)
        return SqliteRecordStore(sqlite_path)
    raise ValueError(f"unknown storage backend {backend!r}; expected one of {', '.join(BACKENDS)}")


__all__ = [
    "BACKENDS",
    "InMemoryRecordStore",
    "RecordStore",
    "SqliteRecordStore",
    "build_record_store",
]
