"""
SQL record store — every collection lives in the ``records`` table.
"""

from __future__ import annotations

import copy
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from pizzaportal.core.exceptions import RecordExists, RecordNotFound, StoreError
from pizzaportal.db.base import Base
from pizzaportal.db.session import build_session_factory
from pizzaportal.models.record import StoredRecord
from pizzaportal.store.base import COLLECTIONS, Record, RecordStore

logger = logging.getLogger(__name__)


class SqlRecordStore(RecordStore):
    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = build_session_factory(engine)

    @staticmethod
    def _check(collection: str) -> None:
        if collection not in COLLECTIONS:
            raise StoreError(f"Unknown collection: {collection}")

    async def init(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            raise StoreError("Could not initialise the records table") from exc
        logger.info("SQL record store ready")

    async def close(self) -> None:
        await self.engine.dispose()

    async def create(self, collection: str, key: str, record: Record) -> None:
        self._check(collection)
        async with self.session_factory() as session:
            session.add(
                StoredRecord(collection=collection, key=key, data=copy.deepcopy(record))
            )
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise RecordExists(collection, key) from None
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StoreError(f"Could not create {collection}/{key}") from exc

    async def read(self, collection: str, key: str) -> Record:
        self._check(collection)
        async with self.session_factory() as session:
            try:
                row = await session.get(StoredRecord, (collection, key))
            except SQLAlchemyError as exc:
                raise StoreError(f"Could not read {collection}/{key}") from exc
            if row is None:
                raise RecordNotFound(collection, key)
            return copy.deepcopy(row.data)

    async def update(self, collection: str, key: str, record: Record) -> None:
        self._check(collection)
        async with self.session_factory() as session:
            try:
                row = await session.get(StoredRecord, (collection, key))
                if row is None:
                    raise RecordNotFound(collection, key)
                # Assign a fresh object so the JSON column is flagged dirty
                row.data = copy.deepcopy(record)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StoreError(f"Could not update {collection}/{key}") from exc

    async def delete(self, collection: str, key: str) -> None:
        self._check(collection)
        async with self.session_factory() as session:
            try:
                row = await session.get(StoredRecord, (collection, key))
                if row is None:
                    raise RecordNotFound(collection, key)
                await session.delete(row)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StoreError(f"Could not delete {collection}/{key}") from exc

    async def list(self, collection: str) -> list[str]:
        self._check(collection)
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    select(StoredRecord.key).where(StoredRecord.collection == collection)
                )
            except SQLAlchemyError as exc:
                raise StoreError(f"Could not list {collection}") from exc
            return list(result.scalars().all())
