"""
Source adapter protocol and probe DTO.

Contract:
    SourceAdapter.read() yields one dict per non-blank data row. Keys are the
    header cells lower-cased and trimmed; values are strings, trimmed.
    SourceAdapter.probe() returns a quick snapshot: row count, columns,
    sample rows.

    A source is a filesystem path, the raw file bytes, or a binary stream.
    Streams passed in by the caller are never closed by the adapter.

Architecture: inventory_ingestion/adapters. File I/O only, no store access.
"""

from __future__ import annotations

import io
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, BinaryIO, Iterator, Protocol, Union, runtime_checkable

Source = Union[Path, str, bytes, BinaryIO]

SAMPLE_SIZE = 5


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading tabular sources into row dicts."""

    def read(self, source: Source, options: dict[str, Any] | None = None) -> Iterator[dict[str, str]]:
        """Yield one dict per non-blank data row."""
        ...

    def probe(self, source: Source, options: dict[str, Any] | None = None) -> "SourceProbe":
        """Quick probe: row count, detected columns, sample rows."""
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing a source (row count, columns, first N rows)."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[dict[str, str], ...]  # First 5 rows; do not mutate
    encoding: str | None = None
    sheet_name: str | None = None


@contextmanager
def open_binary(source: Source) -> Iterator[BinaryIO]:
    """Binary stream over ``source``; closes only what it opened."""
    if isinstance(source, (str, Path)):
        with open(source, "rb") as f:
            yield f
    elif isinstance(source, (bytes, bytearray)):
        yield io.BytesIO(source)
    else:
        yield source


def normalize_header(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def cell_text(value: Any) -> str:
    """Stringify a cell the way a spreadsheet shows it, trimmed."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def build_headers(cells: list[Any]) -> list[str]:
    """Normalized header keys; blanks stay blank, duplicates get a suffix."""
    headers: list[str] = []
    for cell in cells:
        key = normalize_header(cell)
        if key:
            base, n = key, 0
            while key in headers:
                n += 1
                key = f"{base}_{n}"
        headers.append(key)
    return headers


def row_dict(headers: list[str], cells: list[Any]) -> dict[str, str] | None:
    """Zip one row against the headers; None when every cell is blank."""
    values = [cell_text(c) for c in cells]
    if not any(values):
        return None
    row: dict[str, str] = {}
    for i, key in enumerate(headers):
        if key:
            row[key] = values[i] if i < len(values) else ""
    return row
