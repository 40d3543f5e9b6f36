"""
CSV source adapter.

Uses csv.reader over a UTF-8 text wrapper (BOM stripped via utf-8-sig).
Configurable: delimiter, encoding, skip_rows. Streams rows.
"""

from __future__ import annotations

import csv
import io
from typing import Any, Iterator

from inventory_ingestion.adapters.base import (
    SAMPLE_SIZE,
    Source,
    SourceProbe,
    build_headers,
    open_binary,
    row_dict,
)


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() == "utf-8":
        return "utf-8-sig"  # Strip BOM if present
    return enc


class CsvSourceAdapter:
    """Read CSV as one dict per non-blank row. Streams; does not load entire file."""

    def _rows(self, source: Source, options: dict[str, Any]) -> Iterator[tuple[list[str], dict[str, str] | None]]:
        encoding = _get_encoding(options)
        delimiter = options.get("delimiter", ",")
        skip_rows = int(options.get("skip_rows", 0))

        with open_binary(source) as raw:
            text = io.TextIOWrapper(raw, encoding=encoding, newline="")
            try:
                reader = csv.reader(text, delimiter=delimiter)
                for _ in range(skip_rows):
                    next(reader, None)
                header = next(reader, None)
                if header is None:
                    return
                headers = build_headers(header)
                yield headers, None
                for cells in reader:
                    row = row_dict(headers, cells)
                    if row is not None:
                        yield headers, row
            finally:
                # Leave the caller's stream open
                text.detach()

    def read(self, source: Source, options: dict[str, Any] | None = None) -> Iterator[dict[str, str]]:
        for _, row in self._rows(source, options or {}):
            if row is not None:
                yield row

    def probe(self, source: Source, options: dict[str, Any] | None = None) -> SourceProbe:
        options = options or {}
        count = 0
        columns: tuple[str, ...] = ()
        sample: list[dict[str, str]] = []
        for headers, row in self._rows(source, options):
            if row is None:
                columns = tuple(h for h in headers if h)
                continue
            if len(sample) < SAMPLE_SIZE:
                sample.append(row)
            count += 1
        return SourceProbe(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            encoding=_get_encoding(options),
        )
