"""
Row validators for bulk import.

Each validator takes one normalized ``ImportRow`` and returns a list of
``ValidationIssue`` (empty when the row passes). Failing rows stay in the
preview with their issues attached; they are never written.

Architecture: inventory_ingestion/domain. ZERO I/O.
"""

from __future__ import annotations

from typing import Callable

from inventory_kernel.domain.dtos import ValidationIssue

from inventory_ingestion.domain.types import ImportRow

RowValidator = Callable[[ImportRow], list[ValidationIssue]]

_QUANTITY_FIELDS = (
    ("total_quantity", "Total quantity"),
    ("issued_quantity", "Issued quantity"),
    ("returned_quantity", "Returned quantity"),
)


def validate_item_name(row: ImportRow) -> list[ValidationIssue]:
    if row.item_name:
        return []
    return [ValidationIssue("REQUIRED_FIELD", "Item name is required", "item_name")]


def validate_non_negative(row: ImportRow) -> list[ValidationIssue]:
    errors: list[ValidationIssue] = []
    for field_name, label in _QUANTITY_FIELDS:
        value = getattr(row, field_name)
        if value < 0:
            errors.append(
                ValidationIssue(
                    "NEGATIVE_QUANTITY",
                    f"{label} cannot be negative",
                    field_name,
                    {"value": value},
                )
            )
    return errors


def validate_returned_within_issued(row: ImportRow) -> list[ValidationIssue]:
    if row.returned_quantity <= row.issued_quantity:
        return []
    return [
        ValidationIssue(
            "RETURNED_EXCEEDS_ISSUED",
            "Returned quantity cannot exceed issued quantity",
            "returned_quantity",
            {"returned": row.returned_quantity, "issued": row.issued_quantity},
        )
    ]


def validate_total_covers_issued(row: ImportRow) -> list[ValidationIssue]:
    if row.total_quantity >= row.issued_quantity:
        return []
    return [
        ValidationIssue(
            "TOTAL_BELOW_ISSUED",
            "Total quantity cannot be less than issued quantity",
            "total_quantity",
            {"total": row.total_quantity, "issued": row.issued_quantity},
        )
    ]


ROW_VALIDATORS: tuple[RowValidator, ...] = (
    validate_item_name,
    validate_non_negative,
    validate_returned_within_issued,
    validate_total_covers_issued,
)


def validate_row(
    row: ImportRow,
    validators: tuple[RowValidator, ...] = ROW_VALIDATORS,
) -> list[ValidationIssue]:
    """Run every validator; issues come back in validator order."""
    errors: list[ValidationIssue] = []
    for validator in validators:
        errors.extend(validator(row))
    return errors
