"""
inventory_ingestion.domain.types -- Pure frozen dataclasses for bulk import.

ZERO I/O. Imports only from inventory_kernel.domain.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from inventory_kernel.domain.dtos import ValidationIssue
from inventory_kernel.domain.types import DepartmentTag, ItemCategory


@dataclass(frozen=True)
class ColumnMapping:
    """Accepted header names per import field, first non-empty match wins."""

    item_name: tuple[str, ...] = ("item name", "itemname", "name", "item")
    category: tuple[str, ...] = ("category", "cat")
    department_tag: tuple[str, ...] = ("type",)
    total_quantity: tuple[str, ...] = ("total quantity", "totalquantity", "total", "quantity")
    issued_quantity: tuple[str, ...] = ("issued", "issued quantity")
    returned_quantity: tuple[str, ...] = ("returned", "returned quantity")
    remaining_quantity: tuple[str, ...] = ("remaining", "remaining quantity")


@dataclass(frozen=True)
class ImportRow:
    """One normalized source row. ``row_index`` counts the header as row 1."""

    row_index: int
    item_name: str
    category: ItemCategory
    department_tag: DepartmentTag
    total_quantity: int
    issued_quantity: int = 0
    returned_quantity: int = 0
    remaining_quantity: int = 0
    errors: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def error_messages(self) -> list[str]:
        return [e.message for e in self.errors]


@dataclass(frozen=True)
class ImportPreview:
    """Every parsed row with its validation outcome. Nothing is written yet."""

    source_filename: str
    rows: tuple[ImportRow, ...] = ()
    columns: tuple[str, ...] = ()

    @property
    def valid_rows(self) -> tuple[ImportRow, ...]:
        return tuple(r for r in self.rows if r.is_valid)

    @property
    def invalid_rows(self) -> tuple[ImportRow, ...]:
        return tuple(r for r in self.rows if not r.is_valid)

    @property
    def total_count(self) -> int:
        return len(self.rows)

    @property
    def valid_count(self) -> int:
        return len(self.valid_rows)

    @property
    def invalid_count(self) -> int:
        return len(self.invalid_rows)


@dataclass(frozen=True)
class ImportResult:
    """Outcome of committing a preview."""

    created_ids: tuple[str, ...] = ()
    batches_committed: int = 0
    skipped_rows: tuple[int, ...] = field(default=())  # row_index of invalid rows

    @property
    def created_count(self) -> int:
        return len(self.created_ids)
