"""
Document store protocol and write DTOs.

Contract:
    A store holds named collections of JSON-like documents keyed by string
    id. Every document carries a ``version`` that starts at 1 and increases
    by one on every write; writes may name an ``expected_version`` to make
    them compare-and-swap.

    ``subscribe()`` pushes the full current snapshot of a collection to the
    callback once immediately and again after every committed change. A
    store may coalesce several writes into one notification.

    ``commit()`` applies up to ``max_batch_size`` writes atomically: either
    all land or none do.

Architecture: inventory_kernel/store. No domain imports; the catalog and
ledger services translate documents to domain types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol, Sequence, runtime_checkable

DEFAULT_MAX_BATCH_SIZE = 500


@dataclass(frozen=True)
class Document:
    """Immutable snapshot of one stored document."""

    id: str
    fields: Mapping[str, Any]
    version: int = 1


@dataclass(frozen=True)
class PutOp:
    """Create or replace a document."""

    collection: str
    doc_id: str
    fields: Mapping[str, Any]
    expected_version: int | None = None  # 0 means "must not exist"


@dataclass(frozen=True)
class DeleteOp:
    """Delete a document."""

    collection: str
    doc_id: str
    expected_version: int | None = None


WriteOp = PutOp | DeleteOp

SnapshotCallback = Callable[[tuple[Document, ...]], None]


@dataclass
class Subscription:
    """Handle returned by ``subscribe``; call ``unsubscribe()`` to stop."""

    collection: str
    _cancel: Callable[[], None] = field(repr=False)
    active: bool = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._cancel()


@runtime_checkable
class DocumentStore(Protocol):
    """Persistent document store with change notification."""

    max_batch_size: int

    def new_id(self, collection: str) -> str:
        """Allocate a fresh document id."""
        ...

    def get(self, collection: str, doc_id: str) -> Document | None:
        ...

    def query(
        self,
        collection: str,
        predicate: Callable[[Document], bool] | None = None,
    ) -> tuple[Document, ...]:
        """One-shot read of every document matching ``predicate``."""
        ...

    def put(
        self,
        collection: str,
        doc_id: str,
        fields: Mapping[str, Any],
        expected_version: int | None = None,
    ) -> Document:
        ...

    def delete(
        self,
        collection: str,
        doc_id: str,
        expected_version: int | None = None,
    ) -> None:
        ...

    def commit(self, writes: Sequence[WriteOp]) -> tuple[Document | None, ...]:
        """Apply writes atomically. Returns the new Document (or None for deletes) per write."""
        ...

    def subscribe(self, collection: str, callback: SnapshotCallback) -> Subscription:
        ...
