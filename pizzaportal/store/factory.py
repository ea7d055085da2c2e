"""Build the configured record store backend."""

from __future__ import annotations

from pizzaportal.core.config import Settings
from pizzaportal.db.session import build_engine
from pizzaportal.store.base import RecordStore
from pizzaportal.store.file import FileRecordStore
from pizzaportal.store.sql import SqlRecordStore


def build_store(config: Settings) -> RecordStore:
    if config.STORE_BACKEND == "sql":
        return SqlRecordStore(build_engine(config.DATABASE_URL))
    return FileRecordStore(config.DATA_DIR)
