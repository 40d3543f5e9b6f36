"""Bulk import of catalog items from CSV and XLSX sources."""

from inventory_ingestion.domain.types import ColumnMapping, ImportPreview, ImportResult, ImportRow
from inventory_ingestion.services.import_service import ImportService

__all__ = ["ColumnMapping", "ImportPreview", "ImportResult", "ImportRow", "ImportService"]
