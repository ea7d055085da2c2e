"""
JSON-file record store: one directory per collection, one ``<key>.json``
file per record. Blocking file I/O runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path

from pizzaportal.core.exceptions import RecordExists, RecordNotFound, StoreError
from pizzaportal.store.base import COLLECTIONS, SAFE_KEY_RE, Record, RecordStore

logger = logging.getLogger(__name__)

_SUFFIX = ".json"


class FileRecordStore(RecordStore):
    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    # ── Paths ───────────────────────────────────────────────────────
    def _path(self, collection: str, key: str) -> Path:
        if collection not in COLLECTIONS:
            raise StoreError(f"Unknown collection: {collection}")
        if not SAFE_KEY_RE.match(key):
            # Such a key can never have been written
            raise RecordNotFound(collection, key)
        return self.base_dir / collection / f"{key}{_SUFFIX}"

    # ── Blocking primitives ─────────────────────────────────────────
    def _create_sync(self, collection: str, key: str, record: Record) -> None:
        path = self._path(collection, key)
        try:
            with path.open("x", encoding="utf-8") as fh:
                json.dump(record, fh)
        except FileExistsError:
            raise RecordExists(collection, key) from None
        except OSError as exc:
            raise StoreError(f"Could not create {collection}/{key}") from exc

    def _read_sync(self, collection: str, key: str) -> Record:
        path = self._path(collection, key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise RecordNotFound(collection, key) from None
        except OSError as exc:
            raise StoreError(f"Could not read {collection}/{key}") from exc
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise StoreError(f"Corrupt record {collection}/{key}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Corrupt record {collection}/{key}")
        return data

    def _update_sync(self, collection: str, key: str, record: Record) -> None:
        path = self._path(collection, key)
        if not path.is_file():
            raise RecordNotFound(collection, key)

        # Write a sibling temp file, then swap it in with a single rename
        try:
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{key}.", suffix=".tmp")
        except OSError as exc:
            raise StoreError(f"Could not update {collection}/{key}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(record, fh)
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Could not update {collection}/{key}") from exc

    def _delete_sync(self, collection: str, key: str) -> None:
        path = self._path(collection, key)
        try:
            path.unlink()
        except FileNotFoundError:
            raise RecordNotFound(collection, key) from None
        except OSError as exc:
            raise StoreError(f"Could not delete {collection}/{key}") from exc

    def _list_sync(self, collection: str) -> list[str]:
        if collection not in COLLECTIONS:
            raise StoreError(f"Unknown collection: {collection}")
        folder = self.base_dir / collection
        try:
            return [p.name[: -len(_SUFFIX)] for p in folder.glob(f"*{_SUFFIX}")]
        except OSError as exc:
            raise StoreError(f"Could not list {collection}") from exc

    def _init_sync(self) -> None:
        for collection in COLLECTIONS:
            (self.base_dir / collection).mkdir(parents=True, exist_ok=True)

    # ── Async API ───────────────────────────────────────────────────
    async def init(self) -> None:
        await asyncio.to_thread(self._init_sync)
        logger.info("File record store ready at %s", self.base_dir)

    async def create(self, collection: str, key: str, record: Record) -> None:
        if not SAFE_KEY_RE.match(key):
            raise StoreError(f"Invalid record key for {collection}")
        await asyncio.to_thread(self._create_sync, collection, key, record)

    async def read(self, collection: str, key: str) -> Record:
        return await asyncio.to_thread(self._read_sync, collection, key)

    async def update(self, collection: str, key: str, record: Record) -> None:
        await asyncio.to_thread(self._update_sync, collection, key, record)

    async def delete(self, collection: str, key: str) -> None:
        await asyncio.to_thread(self._delete_sync, collection, key)

    async def list(self, collection: str) -> list[str]:
        return await asyncio.to_thread(self._list_sync, collection)
