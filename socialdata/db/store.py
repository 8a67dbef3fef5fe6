from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import copy
import logging

from socialdata.db.base import DocumentRow, generate_id, utcnow
from socialdata.db.codec import encode_value, decode_value
from socialdata.db.query import Query, Snapshot
from socialdata.exceptions import NotFoundError, RemoteOperationError
from socialdata.realtime.manager import (
    LocalChangeFeed,
    ListenerRegistration,
    QueryListener,
    SnapshotHandler,
)

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    """Placeholder replaced by the store's clock at write time"""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def _resolve_sentinels(value: Any, now) -> Any:
    if value is SERVER_TIMESTAMP:
        return now
    if isinstance(value, dict):
        return {key: _resolve_sentinels(item, now) for key, item in value.items()}
    if isinstance(value, list):
        return [_resolve_sentinels(item, now) for item in value]
    return value


def _apply_changes(data: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Merge changes into a copy of data; dotted keys address nested maps"""
    merged = copy.deepcopy(data)
    for key, value in changes.items():
        target = merged
        parts = key.split(".")
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            target = target[part]
        target[parts[-1]] = value
    return merged


def _json_filter(field_path: str, value: Any):
    """SQL prefilter for a string equality filter, or None to leave it to Python"""
    if not isinstance(value, str):
        return None
    parts = field_path.split(".")
    element = DocumentRow.data[parts[0]] if len(parts) == 1 else DocumentRow.data[tuple(parts)]
    return element.as_string() == value


class DocumentStore:
    """Schema-less collections of documents with live queries.

    Documents live in a single SQLAlchemy table. Queries are equality
    filters plus one ordering, evaluated over a collection's documents.
    Every committed write is announced on the change feed so standing
    queries can re-deliver their result sets.
    """

    def __init__(self, session_factory: async_sessionmaker, feed: Optional[LocalChangeFeed] = None):
        self.session_factory = session_factory
        self.feed = feed or LocalChangeFeed()

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert a document and return its store-assigned id"""
        now = utcnow()
        doc_id = generate_id()
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(DocumentRow(
                        collection=collection,
                        id=doc_id,
                        data=encode_value(_resolve_sentinels(data, now)),
                        created_at=now,
                        updated_at=now,
                    ))
        except SQLAlchemyError as e:
            logger.error(f"Store error adding to {collection}: {e}")
            raise RemoteOperationError(str(e)) from e

        await self._announce(collection)
        return doc_id

    async def get(self, collection: str, doc_id: str) -> Optional[Snapshot]:
        """Get a document by id, or None"""
        try:
            async with self.session_factory() as session:
                row = await self._get_row(session, collection, doc_id)
        except SQLAlchemyError as e:
            logger.error(f"Store error reading {collection}/{doc_id}: {e}")
            raise RemoteOperationError(str(e)) from e

        if row is None:
            return None
        return self._to_snapshot(row)

    async def find(self, query: Query) -> List[Snapshot]:
        """Run a query over one collection.

        String equality filters are narrowed in SQL; the full query is then
        applied to the rows that come back, so the SQL step may only widen
        the candidate set, never drop a match.
        """
        stmt = select(DocumentRow).where(
            DocumentRow.collection == query.collection
        ).order_by(DocumentRow.seq)

        for field_path, value in query.filters:
            clause = _json_filter(field_path, value)
            if clause is not None:
                stmt = stmt.where(clause)

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Store error querying {query.collection}: {e}")
            raise RemoteOperationError(str(e)) from e

        return query.apply([self._to_snapshot(row) for row in rows])

    async def update(self, collection: str, doc_id: str, changes: Dict[str, Any]) -> None:
        """Merge changes into an existing document"""
        now = utcnow()
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    row = await self._get_row(session, collection, doc_id)
                    if row is None:
                        raise NotFoundError(f"No document to update: {collection}/{doc_id}")

                    current = decode_value(row.data)
                    merged = _apply_changes(current, _resolve_sentinels(changes, now))
                    # Assign a new object so the JSON column is flagged dirty
                    row.data = encode_value(merged)
                    row.updated_at = now
        except SQLAlchemyError as e:
            logger.error(f"Store error updating {collection}/{doc_id}: {e}")
            raise RemoteOperationError(str(e)) from e

        await self._announce(collection)

    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document; deleting a missing document is not an error"""
        await self.delete_many(collection, [doc_id])

    async def delete_many(self, collection: str, doc_ids: Iterable[str]) -> int:
        """Delete a batch of documents in one statement"""
        doc_ids = list(doc_ids)
        if not doc_ids:
            return 0

        stmt = delete(DocumentRow).where(
            DocumentRow.collection == collection,
            DocumentRow.id.in_(doc_ids),
        )
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    deleted = result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Store error deleting from {collection}: {e}")
            raise RemoteOperationError(str(e)) from e

        await self._announce(collection)
        return deleted

    async def listen(self, query: Query, handler: SnapshotHandler) -> ListenerRegistration:
        """Deliver the query's result set now and after every change to it"""
        listener = QueryListener(query, handler, self.find)
        registration = self.feed.add(listener)
        try:
            await listener.refresh()
        except Exception:
            registration.remove()
            raise
        return registration

    async def _announce(self, collection: str):
        """Publish a committed change; a feed failure costs only live delivery"""
        try:
            await self.feed.publish(collection)
        except Exception as e:
            logger.error(f"Error publishing change on {collection}: {e}")

    async def _get_row(self, session: AsyncSession, collection: str, doc_id: str) -> Optional[DocumentRow]:
        stmt = select(DocumentRow).where(
            DocumentRow.collection == collection,
            DocumentRow.id == doc_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_snapshot(row: DocumentRow) -> Snapshot:
        return Snapshot(collection=row.collection, id=row.id, data=decode_value(row.data))
