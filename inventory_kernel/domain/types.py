"""
inventory_kernel.domain.types -- Pure frozen dataclasses for catalog and ledger.

ZERO I/O. Every value the services, engines and selectors pass around is one
of these immutable snapshots; persistence goes through
``inventory_kernel.domain.documents``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterator, Mapping


# =============================================================================
# Closed enumerations
# =============================================================================


class ItemCategory(str, Enum):
    """Governs whether issued units come back."""

    CONSUMABLE = "consumable"  # Used up on issue; never returned
    NON_CONSUMABLE = "non-consumable"


class DepartmentTag(str, Enum):
    """Clinic department an item is classified under."""

    PHYSIOTHERAPY = "Physiotherapy"
    STRENGTH_AND_CONDITIONING = "Strength and Conditioning"
    PSYCHOLOGICAL = "Psychological"
    BIOMECHANICS = "Biomechanics"


class IssueStatus(str, Enum):
    """Issue record lifecycle status."""

    PENDING_ACKNOWLEDGMENT = "pending_acknowledgment"  # Defined; nothing produces it
    ACKNOWLEDGED = "acknowledged"
    RETURNED = "returned"  # Terminal


# =============================================================================
# Identities
# =============================================================================


@dataclass(frozen=True)
class Actor:
    """The signed-in user performing an operation."""

    id: str
    name: str = ""


@dataclass(frozen=True)
class StaffMember:
    """A staff directory entry that stock can be issued to."""

    id: str
    user_name: str
    user_email: str = ""
    role: str = ""
    status: str = ""


# =============================================================================
# Catalog
# =============================================================================


@dataclass(frozen=True)
class Item:
    """Catalog entry. ``declared_total_quantity`` is the only authored quantity."""

    id: str
    name: str
    category: ItemCategory
    department_tag: DepartmentTag
    declared_total_quantity: int
    stored_issued_quantity: int = 0  # Write-side cache
    stored_returned_quantity: int = 0  # Write-side cache
    created_by: str | None = None
    created_by_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None
    version: int = 0

    @property
    def is_consumable(self) -> bool:
        return self.category is ItemCategory.CONSUMABLE


# =============================================================================
# Ledger
# =============================================================================


@dataclass(frozen=True)
class ReturnEvent:
    """One return against an issue record. Append-only."""

    quantity: int
    returned_by: str | None = None
    returned_at: datetime | None = None
    forced: bool = False  # Admin force-return
    legacy: bool = False  # Synthesized from a flat returnedQuantity field


@dataclass(frozen=True)
class IssueRecord:
    """
    One act of handing a quantity of an item to a staff member.

    ``returned_quantity`` is derived from ``return_events``; it is never
    stored as an absolute value that could be overwritten.
    """

    id: str
    item_id: str
    quantity: int
    issued_to: str
    issued_by: str
    item_category_snapshot: ItemCategory
    status: IssueStatus
    item_name: str = ""
    item_department_tag: DepartmentTag | None = None
    issued_to_name: str = ""
    issued_to_email: str | None = None
    issued_by_name: str = ""
    return_events: tuple[ReturnEvent, ...] = ()
    remarks: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    acknowledged_at: datetime | None = None
    version: int = 0

    @property
    def returned_quantity(self) -> int:
        return sum(e.quantity for e in self.return_events)

    @property
    def outstanding_quantity(self) -> int:
        return self.quantity - self.returned_quantity

    @property
    def is_consumable(self) -> bool:
        return self.item_category_snapshot is ItemCategory.CONSUMABLE

    @property
    def returned_at(self) -> datetime | None:
        return self.return_events[-1].returned_at if self.return_events else None

    @property
    def returned_by(self) -> str | None:
        return self.return_events[-1].returned_by if self.return_events else None


# =============================================================================
# Projection (read-only view produced by the reconciliation engine)
# =============================================================================


@dataclass(frozen=True)
class ItemProjection:
    """Derived issued/returned/remaining quantities for one item."""

    item: Item
    issued_quantity: int  # Currently outstanding
    returned_quantity: int
    remaining_quantity: int
    total_issued: int  # Gross, before returns
    from_ledger: bool  # False when the stored cache was used

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def declared_total_quantity(self) -> int:
        return self.item.declared_total_quantity

    @property
    def over_issued(self) -> bool:
        return self.issued_quantity > self.item.declared_total_quantity

    @property
    def out_of_stock(self) -> bool:
        return self.remaining_quantity == 0


@dataclass(frozen=True)
class InventoryProjection:
    """
    Projection for every catalog item, built in one pass.

    Entries keep catalog order. Equality compares entries and orphans only,
    so two projections over the same snapshots compare equal.
    """

    entries: tuple[ItemProjection, ...] = ()
    orphaned_record_ids: tuple[str, ...] = ()
    _index: Mapping[str, ItemProjection] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", {e.item_id: e for e in self.entries})

    def get(self, item_id: str) -> ItemProjection | None:
        return self._index.get(item_id)

    def __getitem__(self, item_id: str) -> ItemProjection:
        return self._index[item_id]

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._index

    def __iter__(self) -> Iterator[ItemProjection]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
