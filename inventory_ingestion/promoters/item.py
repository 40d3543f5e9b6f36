"""
Item promoter: import row -> catalog item creation write.

Imported stock may already be partly out on loan, so the row's issued and
returned figures seed the item's stored counters directly. Until ledger
records exist for the item, reconciliation trusts those counters.
"""

from __future__ import annotations

from datetime import datetime

from inventory_kernel.domain.documents import item_to_fields
from inventory_kernel.domain.types import Actor, Item
from inventory_kernel.store.base import PutOp

from inventory_ingestion.domain.types import ImportRow


class ItemPromoter:
    """Builds ``PutOp`` writes that create catalog items."""

    def __init__(self, collection: str = "inventoryItems"):
        self.collection = collection

    def to_item(self, row: ImportRow, doc_id: str, actor: Actor, now: datetime) -> Item:
        if not row.is_valid:
            raise ValueError(f"Row {row.row_index} has validation errors")
        return Item(
            id=doc_id,
            name=row.item_name,
            category=row.category,
            department_tag=row.department_tag,
            declared_total_quantity=row.total_quantity,
            stored_issued_quantity=row.issued_quantity,
            stored_returned_quantity=row.returned_quantity,
            created_by=actor.id,
            created_by_name=actor.name or None,
            created_at=now,
            updated_at=now,
            updated_by=actor.id,
        )

    def to_write(self, row: ImportRow, doc_id: str, actor: Actor, now: datetime) -> PutOp:
        item = self.to_item(row, doc_id, actor, now)
        return PutOp(self.collection, doc_id, item_to_fields(item), expected_version=0)
