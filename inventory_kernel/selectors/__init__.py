"""Selectors for the inventory kernel (read side)."""

from inventory_kernel.selectors.inventory_selector import (
    filter_items,
    has_issue_history,
    out_of_stock_consumables,
    records_for_item,
    returnable_records,
)

__all__ = [
    "filter_items",
    "has_issue_history",
    "out_of_stock_consumables",
    "records_for_item",
    "returnable_records",
]
