"""
In-process document store.

Used by the test suite and by embedders that keep everything in memory.
Holds an internal lock only while reading or mutating its dicts; callbacks
run after the lock is released so a subscriber may read the store again.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Callable, Mapping, Sequence
from uuid import uuid4

from inventory_kernel.exceptions import BatchLimitError, OptimisticLockError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.store.base import (
    DEFAULT_MAX_BATCH_SIZE,
    DeleteOp,
    Document,
    PutOp,
    SnapshotCallback,
    Subscription,
    WriteOp,
)

logger = get_logger("store.memory")


class InMemoryDocumentStore:
    """Dict-backed DocumentStore with synchronous change notification."""

    def __init__(self, max_batch_size: int = DEFAULT_MAX_BATCH_SIZE):
        self.max_batch_size = max_batch_size
        self._lock = threading.RLock()
        # collection -> doc_id -> (version, fields); dicts keep insertion order
        self._data: dict[str, dict[str, tuple[int, dict[str, Any]]]] = {}
        self._subscribers: dict[str, dict[int, SnapshotCallback]] = {}
        self._next_token = 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def new_id(self, collection: str) -> str:
        return uuid4().hex

    def get(self, collection: str, doc_id: str) -> Document | None:
        with self._lock:
            entry = self._data.get(collection, {}).get(doc_id)
            if entry is None:
                return None
            return Document(id=doc_id, fields=copy.deepcopy(entry[1]), version=entry[0])

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
        with self._lock:
            return tuple(
                Document(id=doc_id, fields=copy.deepcopy(fields), version=version)
                for doc_id, (version, fields) in self._data.get(collection, {}).items()
            )

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

        with self._lock:
            self._before_apply(writes)
            # Stage against a copy so a failed precondition leaves nothing applied
            staged = {c: dict(docs) for c, docs in self._data.items()}
            results: list[Document | None] = []
            for op in writes:
                docs = staged.setdefault(op.collection, {})
                current = docs.get(op.doc_id)
                current_version = current[0] if current else 0
                if op.expected_version is not None and op.expected_version != current_version:
                    raise OptimisticLockError(
                        op.collection, op.doc_id, op.expected_version,
                        current_version if current else None,
                    )
                if isinstance(op, PutOp):
                    fields = copy.deepcopy(dict(op.fields))
                    docs[op.doc_id] = (current_version + 1, fields)
                    results.append(
                        Document(id=op.doc_id, fields=copy.deepcopy(fields), version=current_version + 1)
                    )
                else:
                    docs.pop(op.doc_id, None)
                    results.append(None)
            self._data = staged
            touched = {op.collection for op in writes}

        logger.debug("store_commit", extra={"writes": len(writes), "collections": sorted(touched)})
        for collection in sorted(touched):
            self._notify(collection)
        return tuple(results)

    def _before_apply(self, writes: Sequence[WriteOp]) -> None:
        """Hook called under the lock before a commit is applied."""

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, collection: str, callback: SnapshotCallback) -> Subscription:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers.setdefault(collection, {})[token] = callback

        def _cancel() -> None:
            with self._lock:
                self._subscribers.get(collection, {}).pop(token, None)

        subscription = Subscription(collection=collection, _cancel=_cancel)
        callback(self._snapshot(collection))
        return subscription

    def _notify(self, collection: str) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(collection, {}).values())
        if not callbacks:
            return
        snapshot = self._snapshot(collection)
        for callback in callbacks:
            try:
                callback(snapshot)
            except Exception:
                logger.exception("subscriber_callback_failed", extra={"collection": collection})
