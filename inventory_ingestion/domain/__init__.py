"""Import domain: pure types and row validators (no I/O)."""

from inventory_ingestion.domain.types import (
    ColumnMapping,
    ImportPreview,
    ImportResult,
    ImportRow,
)
from inventory_ingestion.domain.validators import ROW_VALIDATORS, validate_row

__all__ = [
    "ColumnMapping",
    "ImportPreview",
    "ImportResult",
    "ImportRow",
    "ROW_VALIDATORS",
    "validate_row",
]
