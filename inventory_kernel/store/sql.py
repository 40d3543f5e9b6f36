"""
SQL-backed document store (SQLAlchemy).

Contract:
    Documents live in the ``documents`` table (see
    ``inventory_kernel.models.document``). Each ``commit()`` runs in one
    database transaction; version preconditions are checked against rows
    read with ``SELECT ... FOR UPDATE`` (ignored by SQLite), so a concurrent
    writer either commits first and bumps the version or waits.

    Change notification is in-process: subscribers registered on this store
    instance are called after each successful commit. Writes made by other
    processes are not pushed.

Failure modes:
    - OptimisticLockError when a version precondition fails (nothing applied).
    - BatchLimitError when a write set exceeds ``max_batch_size``.
    - PersistenceError wrapping any SQLAlchemyError (nothing applied).
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Mapping, Sequence
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from inventory_kernel.db.engine import session_scope
from inventory_kernel.exceptions import BatchLimitError, OptimisticLockError, PersistenceError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.document import DocumentModel
from inventory_kernel.store.base import (
    DEFAULT_MAX_BATCH_SIZE,
    DeleteOp,
    Document,
    PutOp,
    SnapshotCallback,
    Subscription,
    WriteOp,
)

logger = get_logger("store.sql")


def _to_document(row: DocumentModel) -> Document:
    return Document(id=row.doc_id, fields=dict(row.fields), version=row.version)


class SqlDocumentStore:
    """DocumentStore over a SQLAlchemy session factory."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ):
        self.max_batch_size = max_batch_size
        self._session_factory = session_factory
        self._sub_lock = threading.Lock()
        self._subscribers: dict[str, dict[int, SnapshotCallback]] = {}
        self._next_token = 0

    def new_id(self, collection: str) -> str:
        return uuid4().hex

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, collection: str, doc_id: str) -> Document | None:
        try:
            with session_scope(self._session_factory) as session:
                row = session.scalars(
                    select(DocumentModel).where(
                        DocumentModel.collection == collection,
                        DocumentModel.doc_id == doc_id,
                    )
                ).first()
                return _to_document(row) if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Read of {collection}/{doc_id} failed: {e}") from e

    def query(
        self,
        collection: str,
        predicate: Callable[[Document], bool] | None = None,
    ) -> tuple[Document, ...]:
        docs = self._snapshot(collection)
        if predicate is None:
            return docs
        return tuple(d for d in docs if predicate(d))

    def _snapshot(self, collection: str) -> tuple[Document, ...]:
        try:
            with session_scope(self._session_factory) as session:
                rows = session.scalars(
                    select(DocumentModel)
                    .where(DocumentModel.collection == collection)
                    .order_by(DocumentModel.created_at, DocumentModel.doc_id)
                ).all()
                return tuple(_to_document(r) for r in rows)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Read of {collection} failed: {e}") from e

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put(
        self,
        collection: str,
        doc_id: str,
        fields: Mapping[str, Any],
        expected_version: int | None = None,
    ) -> Document:
        result = self.commit([PutOp(collection, doc_id, fields, expected_version)])
        assert result[0] is not None
        return result[0]

    def delete(
        self,
        collection: str,
        doc_id: str,
        expected_version: int | None = None,
    ) -> None:
        self.commit([DeleteOp(collection, doc_id, expected_version)])

    def commit(self, writes: Sequence[WriteOp]) -> tuple[Document | None, ...]:
        if len(writes) > self.max_batch_size:
            raise BatchLimitError(len(writes), self.max_batch_size)
        if not writes:
            return ()

        results: list[Document | None] = []
        try:
            with session_scope(self._session_factory) as session:
                for op in writes:
                    row = session.scalars(
                        select(DocumentModel)
                        .where(
                            DocumentModel.collection == op.collection,
                            DocumentModel.doc_id == op.doc_id,
                        )
                        .with_for_update()
                    ).first()
                    current_version = row.version if row else 0
                    if op.expected_version is not None and op.expected_version != current_version:
                        raise OptimisticLockError(
                            op.collection, op.doc_id, op.expected_version,
                            row.version if row else None,
                        )
                    if isinstance(op, PutOp):
                        if row is None:
                            row = DocumentModel(
                                collection=op.collection,
                                doc_id=op.doc_id,
                                version=1,
                                fields=dict(op.fields),
                            )
                            session.add(row)
                        else:
                            row.fields = dict(op.fields)
                            row.version = current_version + 1
                        session.flush()
                        results.append(_to_document(row))
                    else:
                        if row is not None:
                            session.delete(row)
                            session.flush()
                        results.append(None)
        except SQLAlchemyError as e:
            logger.error("store_commit_failed", extra={"writes": len(writes)}, exc_info=True)
            raise PersistenceError(f"Commit of {len(writes)} write(s) failed: {e}") from e

        touched = sorted({op.collection for op in writes})
        logger.debug("store_commit", extra={"writes": len(writes), "collections": touched})
        for collection in touched:
            self._notify(collection)
        return tuple(results)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, collection: str, callback: SnapshotCallback) -> Subscription:
        with self._sub_lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers.setdefault(collection, {})[token] = callback

        def _cancel() -> None:
            with self._sub_lock:
                self._subscribers.get(collection, {}).pop(token, None)

        subscription = Subscription(collection=collection, _cancel=_cancel)
        callback(self._snapshot(collection))
        return subscription

    def _notify(self, collection: str) -> None:
        with self._sub_lock:
            callbacks = list(self._subscribers.get(collection, {}).values())
        if not callbacks:
            return
        snapshot = self._snapshot(collection)
        for callback in callbacks:
            try:
                callback(snapshot)
            except Exception:
                logger.exception("subscriber_callback_failed", extra={"collection": collection})
