"""
Module: inventory_kernel.selectors.inventory_selector
Responsibility: Read-only derived views over a reconciled projection and the
    issue ledger: catalog filtering, out-of-stock consumables and returnable
    issuances.
Architecture position: Kernel > Selectors. Imports domain types only.
    Selectors never touch the store; callers pass in snapshots.

Invariants enforced:
    - Pure functions: no mutation of inputs, input order preserved.
"""

from __future__ import annotations

from collections.abc import Iterable

from inventory_kernel.domain.types import (
    DepartmentTag,
    InventoryProjection,
    IssueRecord,
    IssueStatus,
    ItemCategory,
    ItemProjection,
)


def filter_items(
    projection: InventoryProjection,
    search: str = "",
    category: ItemCategory | None = None,
    department_tag: DepartmentTag | None = None,
) -> list[ItemProjection]:
    """
    Entries matching every given filter.

    ``search`` is a case-insensitive substring matched against the item
    name, category and department tag. None filters match everything.
    """
    needle = search.strip().lower()
    result = []
    for entry in projection:
        item = entry.item
        if category is not None and item.category is not category:
            continue
        if department_tag is not None and item.department_tag is not department_tag:
            continue
        if needle and not any(
            needle in text.lower()
            for text in (item.name, item.category.value, item.department_tag.value)
        ):
            continue
        result.append(entry)
    return result


def out_of_stock_consumables(projection: InventoryProjection) -> list[ItemProjection]:
    """Consumables with nothing left to issue."""
    return [e for e in projection if e.item.is_consumable and e.out_of_stock]


def returnable_records(records: Iterable[IssueRecord]) -> list[IssueRecord]:
    """
    Non-consumable issuances with units still outstanding.

    Includes partially returned records, which accept further returns.
    """
    return [
        r
        for r in records
        if r.status in (IssueStatus.ACKNOWLEDGED, IssueStatus.RETURNED)
        and not r.is_consumable
        and r.outstanding_quantity > 0
    ]


def records_for_item(records: Iterable[IssueRecord], item_id: str) -> list[IssueRecord]:
    return [r for r in records if r.item_id == item_id]


def has_issue_history(records: Iterable[IssueRecord], item_id: str) -> bool:
    """True once any record references the item, returned or not."""
    return any(r.item_id == item_id for r in records)
