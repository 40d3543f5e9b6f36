"""
CatalogService -- create, edit and delete stock items.

Responsibility:
    The only writer of an item's authored fields (name, category,
    department tag, declared total). Issue/return side effects on the
    stored counters belong to ``LedgerService``; bulk creation belongs to
    the import pipeline.

Architecture position:
    Kernel > Services. Writes through the ``DocumentStore``; returns frozen
    ``Item`` values.

Invariants enforced:
    - Declared total is a positive integer and never below the stored
      issued quantity.
    - An item with units issued cannot be deleted.
    - With optimistic concurrency on, edits and deletes are compare-and-swap
      on the version that was read, so a concurrent issuance is never lost.

Failure modes:
    - ValidationError           blank name, missing category, total <= 0
    - ItemNotFoundError         unknown item id
    - ShrinkBelowIssuedError    new total < stored issued quantity
    - OutstandingIssuanceError  delete while stored issued quantity > 0
    - OptimisticLockError       item changed between read and write
"""

from __future__ import annotations

from dataclasses import replace

from inventory_kernel.domain.clock import Clock
from inventory_kernel.domain.documents import item_from_document, item_to_fields
from inventory_kernel.domain.dtos import CreateItemRequest, UpdateItemRequest, ValidationIssue
from inventory_kernel.domain.types import Actor, Item
from inventory_kernel.exceptions import (
    ItemNotFoundError,
    OutstandingIssuanceError,
    ShrinkBelowIssuedError,
    ValidationError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.services.base import BaseService
from inventory_kernel.store.base import DocumentStore

logger = get_logger("services.catalog")


def _positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class CatalogService(BaseService):
    """
    Item catalog operations.

    Args:
        store: Document store holding the items collection.
        clock: Source of created/updated timestamps.
        collection: Items collection name.
        optimistic_concurrency: Compare-and-swap edits and deletes on the
            item version.
    """

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock | None = None,
        collection: str = "inventoryItems",
        optimistic_concurrency: bool = True,
    ):
        super().__init__(store, clock)
        self.collection = collection
        self.optimistic_concurrency = optimistic_concurrency

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_item(self, item_id: str) -> Item:
        doc = self.store.get(self.collection, item_id)
        if doc is None:
            raise ItemNotFoundError(item_id)
        return item_from_document(doc.id, doc.fields, doc.version)

    def find_item(self, item_id: str) -> Item | None:
        doc = self.store.get(self.collection, item_id)
        return item_from_document(doc.id, doc.fields, doc.version) if doc else None

    def list_items(self) -> list[Item]:
        return [
            item_from_document(d.id, d.fields, d.version)
            for d in self.store.query(self.collection)
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_item(self, request: CreateItemRequest, actor: Actor) -> Item:
        """
        Create an item with zero issued and returned units.

        Raises:
            ValidationError: blank name, missing category or total <= 0.
        """
        issues: list[ValidationIssue] = []
        name = (request.name or "").strip()
        if not name:
            issues.append(ValidationIssue("REQUIRED_FIELD", "Item name is required", "name"))
        if request.category is None:
            issues.append(ValidationIssue("REQUIRED_FIELD", "Category is required", "category"))
        if not _positive_int(request.declared_total_quantity):
            issues.append(
                ValidationIssue(
                    "NON_POSITIVE_QUANTITY",
                    "Total quantity must be greater than zero",
                    "declared_total_quantity",
                    {"value": request.declared_total_quantity},
                )
            )
        if issues:
            raise ValidationError(
                "; ".join(i.message for i in issues), issues=issues
            )

        now = self.clock.now()
        item_id = self.store.new_id(self.collection)
        item = Item(
            id=item_id,
            name=name,
            category=request.category,
            department_tag=request.department_tag,
            declared_total_quantity=request.declared_total_quantity,
            created_by=actor.id,
            created_by_name=actor.name or None,
            created_at=now,
            updated_at=now,
            updated_by=actor.id,
        )
        doc = self.store.put(self.collection, item_id, item_to_fields(item), expected_version=0)
        with LogContext.bind(actor_id=actor.id, item_id=item_id):
            logger.info(
                "item_created",
                extra={
                    "category": item.category.value,
                    "declared_total_quantity": item.declared_total_quantity,
                },
            )
        return replace(item, version=doc.version)

    def update_item(self, item_id: str, request: UpdateItemRequest, actor: Actor) -> Item:
        """
        Edit an item's authored fields; None fields keep their value.

        Raises:
            ValidationError: blank name or total <= 0.
            ItemNotFoundError: unknown item.
            ShrinkBelowIssuedError: new total below stored issued quantity.
        """
        issues: list[ValidationIssue] = []
        if request.name is not None and not request.name.strip():
            issues.append(ValidationIssue("REQUIRED_FIELD", "Item name is required", "name"))
        if request.declared_total_quantity is not None and not _positive_int(
            request.declared_total_quantity
        ):
            issues.append(
                ValidationIssue(
                    "NON_POSITIVE_QUANTITY",
                    "Total quantity must be greater than zero",
                    "declared_total_quantity",
                    {"value": request.declared_total_quantity},
                )
            )
        if issues:
            raise ValidationError("; ".join(i.message for i in issues), issues=issues)

        current = self.get_item(item_id)
        new_total = (
            request.declared_total_quantity
            if request.declared_total_quantity is not None
            else current.declared_total_quantity
        )
        if new_total < current.stored_issued_quantity:
            raise ShrinkBelowIssuedError(item_id, new_total, current.stored_issued_quantity)

        updated = replace(
            current,
            name=request.name.strip() if request.name is not None else current.name,
            category=request.category or current.category,
            department_tag=request.department_tag or current.department_tag,
            declared_total_quantity=new_total,
            updated_at=self.clock.now(),
            updated_by=actor.id,
        )
        doc = self.store.put(
            self.collection,
            item_id,
            item_to_fields(updated),
            expected_version=current.version if self.optimistic_concurrency else None,
        )
        with LogContext.bind(actor_id=actor.id, item_id=item_id):
            logger.info(
                "item_updated",
                extra={
                    "declared_total_quantity": new_total,
                    "previous_total_quantity": current.declared_total_quantity,
                },
            )
        return replace(updated, version=doc.version)

    def delete_item(self, item_id: str, actor: Actor | None = None) -> None:
        """
        Hard-delete an item with nothing issued.

        Raises:
            ItemNotFoundError: unknown item.
            OutstandingIssuanceError: stored issued quantity > 0.
        """
        current = self.get_item(item_id)
        if current.stored_issued_quantity > 0:
            raise OutstandingIssuanceError(item_id, current.stored_issued_quantity)
        self.store.delete(
            self.collection,
            item_id,
            expected_version=current.version if self.optimistic_concurrency else None,
        )
        with LogContext.bind(actor_id=actor.id if actor else None, item_id=item_id):
            logger.info("item_deleted")
