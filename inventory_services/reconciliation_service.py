"""
ReconciliationCoordinator -- keeps one live ``InventoryProjection``.

Responsibility:
    Owns BOTH store subscriptions (items and issue records) and republishes
    a freshly reconciled projection whenever either snapshot changes.

Data flow (one direction only):

    items subscription   --> swap passive item snapshot ----+
                                                            +--> reconcile --> projection --> consumers
    records subscription --> swap record snapshot ----------+

    The projection never flows back into either snapshot, and the
    coordinator never subscribes to its own output, so a republish cannot
    trigger another republish.

Invariants enforced:
    - Consumers only ever see a whole projection built from one pair of
      snapshots; the reference swap happens under the lock.
    - Record decoding and reconciliation are pure and cheap, so they run
      under the lock; store I/O and consumer callbacks never do.
    - Records stored without a category snapshot are decoded again on every
      catalog change, so they always use the item's current category.
    - Notifications may arrive in any order or be coalesced by the store;
      the result depends only on the latest snapshots.
"""

from __future__ import annotations

import threading
from typing import Callable

from inventory_engines.reconciliation import reconcile
from inventory_kernel.domain.documents import item_from_document, record_from_document
from inventory_kernel.domain.types import InventoryProjection, IssueRecord, Item
from inventory_kernel.logging_config import get_logger
from inventory_kernel.store.base import Document, DocumentStore, Subscription

logger = get_logger("services.reconciliation")

ProjectionConsumer = Callable[[InventoryProjection], None]


class ReconciliationCoordinator:
    """Single owner of the catalog and ledger subscriptions."""

    def __init__(
        self,
        store: DocumentStore,
        items_collection: str = "inventoryItems",
        issues_collection: str = "inventoryIssues",
    ):
        self.store = store
        self.items_collection = items_collection
        self.issues_collection = issues_collection
        self._lock = threading.Lock()
        self._items: tuple[Item, ...] = ()
        self._records: tuple[IssueRecord, ...] = ()
        self._record_docs: tuple[Document, ...] = ()
        self._projection = InventoryProjection()
        self._consumers: dict[int, ProjectionConsumer] = {}
        self._next_token = 0
        self._subscriptions: list[Subscription] = []
        self._publish_count = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return bool(self._subscriptions)

    def start(self) -> None:
        """Subscribe to both collections. Items first, so records decode against them."""
        if self.running:
            return
        self._subscriptions.append(self.store.subscribe(self.items_collection, self._on_items))
        self._subscriptions.append(self.store.subscribe(self.issues_collection, self._on_records))
        logger.info(
            "coordinator_started",
            extra={"items": len(self._items), "records": len(self._records)},
        )

    def stop(self) -> None:
        """Cancel both subscriptions. The last projection stays readable."""
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()
        logger.info("coordinator_stopped")

    # ------------------------------------------------------------------
    # Subscription callbacks
    # ------------------------------------------------------------------

    def _on_items(self, docs: tuple[Document, ...]) -> None:
        items = tuple(item_from_document(d.id, d.fields, d.version) for d in docs)
        with self._lock:
            self._items = items
            # records without a category snapshot follow the current catalog
            self._records = self._decode_records(self._record_docs)
        self._republish("items")

    def _on_records(self, docs: tuple[Document, ...]) -> None:
        with self._lock:
            self._record_docs = docs
            self._records = self._decode_records(docs)
        self._republish("records")

    def _decode_records(self, docs: tuple[Document, ...]) -> tuple[IssueRecord, ...]:
        """Caller holds the lock."""
        categories = {item.id: item.category for item in self._items}
        return tuple(
            record_from_document(d.id, d.fields, d.version, categories.get) for d in docs
        )

    def _republish(self, trigger: str) -> None:
        with self._lock:
            projection = reconcile(items=self._items, records=self._records)
            self._projection = projection
            self._publish_count += 1
            consumers = list(self._consumers.values())

        logger.debug(
            "projection_published",
            extra={
                "trigger": trigger,
                "entries": len(projection),
                "orphaned_records": len(projection.orphaned_record_ids),
            },
        )
        if projection.orphaned_record_ids:
            logger.warning(
                "orphaned_issue_records",
                extra={"record_ids": list(projection.orphaned_record_ids)},
            )
        for consumer in consumers:
            try:
                consumer(projection)
            except Exception:
                logger.exception("projection_consumer_failed")

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def current(self) -> InventoryProjection:
        with self._lock:
            return self._projection

    def items(self) -> tuple[Item, ...]:
        with self._lock:
            return self._items

    def records(self) -> tuple[IssueRecord, ...]:
        with self._lock:
            return self._records

    @property
    def publish_count(self) -> int:
        """Number of projections published since construction."""
        return self._publish_count

    def subscribe(self, consumer: ProjectionConsumer) -> Callable[[], None]:
        """
        Register a consumer; it is called now with the current projection
        and after every republish. Returns an unsubscribe callable.
        """
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._consumers[token] = consumer
            projection = self._projection

        def unsubscribe() -> None:
            with self._lock:
                self._consumers.pop(token, None)

        consumer(projection)
        return unsubscribe
