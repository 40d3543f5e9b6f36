"""
LedgerService -- issue stock to staff and take it back.

Responsibility:
    Runs the issue/return state machine (``inventory_engines.issuance``)
    against freshly read store state and writes the resulting record and
    item counters together.

Architecture position:
    Kernel > Services. The one kernel service that calls into
    ``inventory_engines``; engines are pure, so no import cycle arises.

Invariants enforced:
    - Every issue or return is ONE ``store.commit`` holding both the record
      write and the item counter write. Either both land or neither does.
    - The issue guard compares against a projection reconciled from the
      ledger at the moment of the call, never against the cached counters
      alone.
    - With optimistic concurrency on, the item write is compare-and-swap on
      the version read for the guard. Two issuances racing for the same
      stock cannot both commit; the loser gets OptimisticLockError.
    - Return quantities accumulate as append-only return events.

Failure modes:
    - ValidationError / CategoryPolicyError before anything is written.
    - ItemNotFoundError / IssueRecordNotFoundError / StaffNotFoundError /
      InsufficientStockError / OverReturnError / NothingOutstandingError /
      InvalidTransitionError after the reads, before the write.
    - OptimisticLockError when the item or record moved underneath us.
    - PersistenceError from the store, surfaced once, never retried.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable

from inventory_engines.issuance import (
    check_issue,
    check_quantity,
    check_return,
    force_return_quantity,
    plan_issue,
    plan_return,
)
from inventory_engines.reconciliation import reconcile
from inventory_kernel.domain.clock import Clock
from inventory_kernel.domain.documents import (
    item_from_document,
    item_to_fields,
    record_from_document,
    record_to_fields,
)
from inventory_kernel.domain.dtos import IssueRequest, ReturnRequest
from inventory_kernel.domain.types import Actor, IssueRecord, Item, ItemCategory
from inventory_kernel.exceptions import (
    ConcurrencyError,
    IssueRecordNotFoundError,
    ItemNotFoundError,
    PersistenceError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.services.base import BaseService
from inventory_kernel.services.staff_directory import StaffDirectory
from inventory_kernel.store.base import Document, DocumentStore, PutOp

logger = get_logger("services.ledger")


class LedgerService(BaseService):
    """
    Issue ledger operations.

    Args:
        store: Document store holding items, issue records and staff.
        staff: Directory used to resolve issue targets.
        clock: Source of record timestamps.
        items_collection: Items collection name.
        issues_collection: Issue records collection name.
        optimistic_concurrency: Compare-and-swap ledger writes on the item
            and record versions. Off reproduces last-writer-wins.
    """

    def __init__(
        self,
        store: DocumentStore,
        staff: StaffDirectory,
        clock: Clock | None = None,
        items_collection: str = "inventoryItems",
        issues_collection: str = "inventoryIssues",
        optimistic_concurrency: bool = True,
    ):
        super().__init__(store, clock)
        self.staff = staff
        self.items_collection = items_collection
        self.issues_collection = issues_collection
        self.optimistic_concurrency = optimistic_concurrency

    # ------------------------------------------------------------------
    # Decoding helpers
    # ------------------------------------------------------------------

    def _category_lookup(self) -> Callable[[str], ItemCategory | None]:
        """Catalog category by item id, memoized for one decode pass."""
        cache: dict[str, ItemCategory | None] = {}

        def lookup(item_id: str) -> ItemCategory | None:
            if item_id not in cache:
                doc = self.store.get(self.items_collection, item_id)
                cache[item_id] = (
                    item_from_document(doc.id, doc.fields).category if doc else None
                )
            return cache[item_id]

        return lookup

    def _decode(self, doc: Document, lookup=None) -> IssueRecord:
        return record_from_document(
            doc.id, doc.fields, doc.version, lookup or self._category_lookup()
        )

    def _load_item(self, item_id: str) -> Item:
        doc = self.store.get(self.items_collection, item_id)
        if doc is None:
            raise ItemNotFoundError(item_id)
        return item_from_document(doc.id, doc.fields, doc.version)

    def _expected(self, version: int) -> int | None:
        return version if self.optimistic_concurrency else None

    def _commit(self, event: str, writes: list[PutOp]) -> tuple[Document | None, ...]:
        try:
            return self.store.commit(writes)
        except ConcurrencyError:
            logger.warning(f"{event}_conflict", exc_info=True)
            raise
        except PersistenceError:
            logger.error(f"{event}_write_failed", exc_info=True)
            raise

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_record(self, record_id: str) -> IssueRecord:
        doc = self.store.get(self.issues_collection, record_id)
        if doc is None:
            raise IssueRecordNotFoundError(record_id)
        return self._decode(doc)

    def list_records(self, item_id: str | None = None) -> list[IssueRecord]:
        """All records, or those of one item, in store order."""
        predicate = None
        if item_id is not None:
            predicate = lambda d: d.fields.get("itemId") == item_id  # noqa: E731
        lookup = self._category_lookup()
        return [self._decode(d, lookup) for d in self.store.query(self.issues_collection, predicate)]

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def record_issuance(self, request: IssueRequest, actor: Actor) -> IssueRecord:
        """
        Issue ``request.quantity`` units of an item to an active staff member.

        The new record starts acknowledged. The item's stored issued counter
        moves by the same quantity in the same commit.
        """
        check_quantity(request.quantity)

        with LogContext.bind(actor_id=actor.id, item_id=request.item_id):
            item = self._load_item(request.item_id)
            records = self.list_records(item.id)
            projection = reconcile(items=(item,), records=records)[item.id]
            check_issue(projection, request.quantity)
            staff = self.staff.resolve(request.issued_to)

            record, updated_item = plan_issue(
                record_id=self.store.new_id(self.issues_collection),
                item=item,
                quantity=request.quantity,
                staff=staff,
                actor=actor,
                now=self.clock.now(),
                remarks=request.remarks,
            )
            results = self._commit(
                "issue",
                [
                    PutOp(
                        self.items_collection,
                        item.id,
                        item_to_fields(updated_item),
                        self._expected(item.version),
                    ),
                    PutOp(self.issues_collection, record.id, record_to_fields(record), 0),
                ],
            )
            logger.info(
                "item_issued",
                extra={
                    "issued_record_id": record.id,
                    "quantity": request.quantity,
                    "issued_to": staff.id,
                    "remaining_before": projection.remaining_quantity,
                },
            )
        return replace(record, version=results[1].version)

    # ------------------------------------------------------------------
    # Return
    # ------------------------------------------------------------------

    def _apply_return(
        self,
        record: IssueRecord,
        quantity: int,
        actor: Actor,
        forced: bool,
    ) -> IssueRecord:
        item = self._load_item(record.item_id)
        updated_record, updated_item = plan_return(
            record=record,
            item=item,
            quantity=quantity,
            actor=actor,
            now=self.clock.now(),
            forced=forced,
        )
        results = self._commit(
            "force_return" if forced else "return",
            [
                PutOp(
                    self.items_collection,
                    item.id,
                    item_to_fields(updated_item),
                    self._expected(item.version),
                ),
                PutOp(
                    self.issues_collection,
                    record.id,
                    record_to_fields(updated_record),
                    self._expected(record.version),
                ),
            ],
        )
        logger.info(
            "item_force_returned" if forced else "item_returned",
            extra={
                "quantity": quantity,
                "returned_total": updated_record.returned_quantity,
                "outstanding": updated_record.outstanding_quantity,
            },
        )
        return replace(updated_record, version=results[1].version)

    def record_return(self, request: ReturnRequest, actor: Actor) -> IssueRecord:
        """
        Return part or all of what is outstanding on a non-consumable record.

        Each call appends one return event; the record moves to (or stays
        in) ``returned``.
        """
        with LogContext.bind(actor_id=actor.id, record_id=request.record_id):
            record = self.get_record(request.record_id)
            check_return(record, request.quantity)
            return self._apply_return(record, request.quantity, actor, forced=False)

    def force_return(self, record_id: str, actor: Actor) -> IssueRecord:
        """Admin path: return the whole outstanding remainder in one forced event."""
        with LogContext.bind(actor_id=actor.id, record_id=record_id):
            record = self.get_record(record_id)
            quantity = force_return_quantity(record)
            return self._apply_return(record, quantity, actor, forced=True)

    # ------------------------------------------------------------------
    # Remarks
    # ------------------------------------------------------------------

    def update_remarks(self, record_id: str, text: str | None) -> IssueRecord:
        """Replace a record's remarks in any status; blank clears them."""
        with LogContext.bind(record_id=record_id):
            record = self.get_record(record_id)
            updated = replace(
                record,
                remarks=(text or "").strip() or None,
                updated_at=self.clock.now(),
            )
            (doc,) = self._commit(
                "remarks",
                [
                    PutOp(
                        self.issues_collection,
                        record_id,
                        record_to_fields(updated),
                        self._expected(record.version),
                    )
                ],
            )
            logger.info("remarks_updated", extra={"cleared": updated.remarks is None})
        return replace(updated, version=doc.version)
