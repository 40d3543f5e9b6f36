"""Source adapters for bulk import (file I/O only, no store access)."""

from pathlib import PurePath

from inventory_ingestion.adapters.base import Source, SourceAdapter, SourceProbe
from inventory_ingestion.adapters.csv_adapter import CsvSourceAdapter
from inventory_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter
from inventory_kernel.exceptions import UnsupportedSourceError


def adapter_for_filename(filename: str) -> SourceAdapter:
    """
    Pick an adapter by file suffix.

    ``.xlsx`` reads as a workbook; legacy ``.xls`` is rejected; anything
    else is parsed as CSV.
    """
    suffix = PurePath(filename).suffix.lower()
    if suffix == ".xlsx":
        return XlsxSourceAdapter()
    if suffix == ".xls":
        raise UnsupportedSourceError(filename)
    return CsvSourceAdapter()


__all__ = [
    "CsvSourceAdapter",
    "Source",
    "SourceAdapter",
    "SourceProbe",
    "XlsxSourceAdapter",
    "adapter_for_filename",
]
