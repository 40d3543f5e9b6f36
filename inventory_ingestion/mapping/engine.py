"""
Mapping engine: pure transformation from a raw source row to an ``ImportRow``.

Header synonyms pick the value for each field (first non-empty match in
priority order). Free text is normalized onto the closed enums and
quantities are parsed leniently, the same way the catalog has always read
spreadsheet cells. ZERO I/O.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping

from inventory_kernel.domain.normalize import (
    normalize_category,
    normalize_department,
    parse_int,
)

from inventory_ingestion.domain.types import ColumnMapping, ImportRow
from inventory_ingestion.domain.validators import validate_row

FIRST_DATA_ROW = 2  # Header is row 1


def pick(raw: Mapping[str, str], names: Iterable[str]) -> str:
    """Value of the first synonym present with a non-empty value, else ''."""
    for name in names:
        value = raw.get(name)
        if value:
            return str(value).strip()
    return ""


def map_row(raw: Mapping[str, str], row_index: int, columns: ColumnMapping) -> ImportRow:
    """Normalize one raw row and attach its validation issues."""
    row = ImportRow(
        row_index=row_index,
        item_name=pick(raw, columns.item_name),
        category=normalize_category(pick(raw, columns.category)),
        department_tag=normalize_department(pick(raw, columns.department_tag)),
        total_quantity=parse_int(pick(raw, columns.total_quantity)),
        issued_quantity=parse_int(pick(raw, columns.issued_quantity)),
        returned_quantity=parse_int(pick(raw, columns.returned_quantity)),
        remaining_quantity=parse_int(pick(raw, columns.remaining_quantity)),
    )
    errors = validate_row(row)
    if not errors:
        return row
    return replace(row, errors=tuple(errors))


def map_rows(
    raw_rows: Iterable[Mapping[str, str]],
    columns: ColumnMapping | None = None,
) -> list[ImportRow]:
    """Map every raw row; row indices start at the first data row."""
    columns = columns or ColumnMapping()
    return [
        map_row(raw, index, columns)
        for index, raw in enumerate(raw_rows, start=FIRST_DATA_ROW)
    ]
