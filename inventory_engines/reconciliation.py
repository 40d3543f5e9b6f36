"""
Module: inventory_engines.reconciliation
Responsibility:
    Derive per-item issued / returned / remaining quantities by joining the
    catalog snapshot with the issue ledger snapshot.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import inventory_kernel.domain.

Invariants enforced:
    - Purity: no clock, no store, no counters. Identical snapshots produce
      equal projections.
    - For an item with ledger records:
          issued    = sum(quantity) - sum(returned_quantity)
          remaining = max(0, declared_total - issued)
      The stored issued/returned counters on the item are ignored.
    - For an item without records the stored counters are used as-is
      (imported stock that was issued before the ledger existed).
    - The projection is built in one pass and returned whole; callers
      never observe a partially reconciled view.

Failure modes:
    - None. Records whose item is not in the catalog are reported in
      ``InventoryProjection.orphaned_record_ids`` instead of raising.

Usage:
    from inventory_engines.reconciliation import reconcile

    projection = reconcile(items=catalog_items, records=issue_records)
    projection["item-1"].remaining_quantity
"""

from __future__ import annotations

from collections.abc import Iterable

from inventory_engines.tracer import traced_engine
from inventory_kernel.domain.types import (
    InventoryProjection,
    IssueRecord,
    Item,
    ItemProjection,
)


def project_item(item: Item, records: Iterable[IssueRecord]) -> ItemProjection:
    """Projection for one item given the ledger records that reference it."""
    records = tuple(records)
    if not records:
        return ItemProjection(
            item=item,
            issued_quantity=item.stored_issued_quantity,
            returned_quantity=item.stored_returned_quantity,
            remaining_quantity=max(0, item.declared_total_quantity - item.stored_issued_quantity),
            total_issued=item.stored_issued_quantity + item.stored_returned_quantity,
            from_ledger=False,
        )

    total_issued = sum(r.quantity for r in records)
    total_returned = sum(r.returned_quantity for r in records)
    issued = total_issued - total_returned
    return ItemProjection(
        item=item,
        issued_quantity=issued,
        returned_quantity=total_returned,
        remaining_quantity=max(0, item.declared_total_quantity - issued),
        total_issued=total_issued,
        from_ledger=True,
    )


@traced_engine("reconciliation", "1.0", fingerprint_fields=("items", "records"))
def reconcile(
    items: Iterable[Item],
    records: Iterable[IssueRecord],
) -> InventoryProjection:
    """
    Join catalog and ledger snapshots into an ``InventoryProjection``.

    Entries follow catalog order. Orphaned record ids follow ledger order.
    """
    items = tuple(items)
    records = tuple(records)
    by_item: dict[str, list[IssueRecord]] = {}
    for record in records:
        by_item.setdefault(record.item_id, []).append(record)

    catalog_ids = {item.id for item in items}
    orphaned = tuple(r.id for r in records if r.item_id not in catalog_ids)

    entries = tuple(project_item(item, by_item.get(item.id, ())) for item in items)
    return InventoryProjection(entries=entries, orphaned_record_ids=orphaned)
