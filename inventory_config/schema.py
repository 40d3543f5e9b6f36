"""
Inventory settings schema.

Frozen dataclasses produced by ``inventory_config.loader`` from the packaged
``defaults.yaml`` merged with an optional site file. Every field has a
default, so ``InventorySettings()`` is a complete, usable configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CollectionNames:
    """Store collection names."""

    items: str = "inventoryItems"
    issues: str = "inventoryIssues"
    staff: str = "staff"


@dataclass(frozen=True)
class LedgerSettings:
    """Issue/return behaviour."""

    optimistic_concurrency: bool = True  # Item-version compare-and-swap
    active_staff_status: str = "Active"


@dataclass(frozen=True)
class ColumnSynonyms:
    """Lower-cased header names accepted for each import field, in priority order."""

    item_name: tuple[str, ...] = ("item name", "itemname", "name", "item")
    category: tuple[str, ...] = ("category", "cat")
    department_tag: tuple[str, ...] = ("type",)
    total_quantity: tuple[str, ...] = ("total quantity", "totalquantity", "total", "quantity")
    issued_quantity: tuple[str, ...] = ("issued", "issued quantity")
    returned_quantity: tuple[str, ...] = ("returned", "returned quantity")
    remaining_quantity: tuple[str, ...] = ("remaining", "remaining quantity")


@dataclass(frozen=True)
class ImportSettings:
    """Bulk import behaviour."""

    batch_size: int = 500
    columns: ColumnSynonyms = field(default_factory=ColumnSynonyms)


@dataclass(frozen=True)
class StoreSettings:
    """Document store backend."""

    database_url: str = "sqlite://"
    max_batch_size: int = 500
    echo: bool = False


@dataclass(frozen=True)
class InventorySettings:
    """Root settings object returned by ``get_active_config()``."""

    collections: CollectionNames = field(default_factory=CollectionNames)
    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    imports: ImportSettings = field(default_factory=ImportSettings)
    store: StoreSettings = field(default_factory=StoreSettings)
