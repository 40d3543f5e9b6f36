"""
XLSX source adapter.

Reads the first worksheet (or the one named/indexed by ``sheet``) with
openpyxl in read-only mode. Row ``skip_rows + 1`` is the header; every
following non-blank row becomes one dict. Numeric cells holding whole
numbers render without a trailing ``.0`` so "12" and 12.0 read the same.
"""

from __future__ import annotations

from typing import Any, Iterator
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from inventory_ingestion.adapters.base import (
    SAMPLE_SIZE,
    Source,
    SourceProbe,
    build_headers,
    open_binary,
    row_dict,
)
from inventory_kernel.exceptions import ValidationError


class XlsxSourceAdapter:
    """
    Read .xlsx workbooks as one dict per row.

    options:
      sheet: 0-based sheet index (int) or sheet name (str). Default: first sheet.
      skip_rows: rows to skip above the header. Default: 0.
    """

    def _get_sheet(self, wb: Any, options: dict[str, Any]) -> Any:
        sheet_ref = options.get("sheet", 0)
        try:
            if isinstance(sheet_ref, int):
                return wb.worksheets[sheet_ref]
            return wb[sheet_ref]
        except (IndexError, KeyError) as e:
            raise ValidationError(
                f"Workbook has no sheet {sheet_ref!r}; sheets: {wb.sheetnames}"
            ) from e

    def _rows(self, source: Source, options: dict[str, Any]) -> Iterator[tuple[str, list[str], dict[str, str] | None]]:
        skip_rows = int(options.get("skip_rows", 0))
        with open_binary(source) as raw:
            try:
                wb = openpyxl.load_workbook(raw, read_only=True, data_only=True)
            except (BadZipFile, InvalidFileException, KeyError, OSError) as e:
                raise ValidationError(f"Not a readable .xlsx workbook: {e}") from e
            try:
                sheet = self._get_sheet(wb, options)
                rows = sheet.iter_rows(min_row=1 + skip_rows, values_only=True)
                header = next(rows, None)
                if header is None:
                    return
                headers = build_headers(list(header))
                yield sheet.title, headers, None
                for cells in rows:
                    row = row_dict(headers, list(cells))
                    if row is not None:
                        yield sheet.title, headers, row
            finally:
                wb.close()

    def read(self, source: Source, options: dict[str, Any] | None = None) -> Iterator[dict[str, str]]:
        for _, _, row in self._rows(source, options or {}):
            if row is not None:
                yield row

    def probe(self, source: Source, options: dict[str, Any] | None = None) -> SourceProbe:
        count = 0
        columns: tuple[str, ...] = ()
        sheet_name = None
        sample: list[dict[str, str]] = []
        for title, headers, row in self._rows(source, options or {}):
            if row is None:
                sheet_name = title
                columns = tuple(h for h in headers if h)
                continue
            if len(sample) < SAMPLE_SIZE:
                sample.append(row)
            count += 1
        return SourceProbe(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            sheet_name=sheet_name,
        )
