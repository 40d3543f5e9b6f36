"""
Source adapter tests: CSV and XLSX reading, probing, adapter selection.

Sources are passed as bytes, paths and caller-owned streams.
"""

import io
import tempfile
from pathlib import Path

import openpyxl
import pytest

from inventory_ingestion.adapters import (
    CsvSourceAdapter,
    XlsxSourceAdapter,
    adapter_for_filename,
)
from inventory_ingestion.adapters.base import build_headers, cell_text, row_dict
from inventory_kernel.exceptions import UnsupportedSourceError, ValidationError

CSV_TEXT = (
    "Item Name,Category,Type,Total Quantity\n"
    "Resistance Band,Non-Consumable,Physiotherapy,10\n"
    ",,,\n"
    "Syringe,Consumable,Physiotherapy,50\n"
)


def _xlsx_bytes(rows, title="Stock", extra_sheet=None) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(row)
    if extra_sheet:
        other = wb.create_sheet(extra_sheet[0])
        for row in extra_sheet[1]:
            other.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestCellHelpers:

    def test_cell_text(self):
        assert cell_text(None) == ""
        assert cell_text(12.0) == "12"
        assert cell_text(3.5) == "3.5"
        assert cell_text(True) == "TRUE"
        assert cell_text("  padded ") == "padded"

    def test_build_headers(self):
        assert build_headers([" Item Name ", None, "Total", "total"]) == ["item name", "", "total", "total_1"]

    def test_row_dict_skips_blank_rows_and_headers(self):
        headers = ["name", "", "total"]
        assert row_dict(headers, ["", None, " "]) is None
        assert row_dict(headers, ["Band", "ignored", "4"]) == {"name": "Band", "total": "4"}
        assert row_dict(headers, ["Band"]) == {"name": "Band", "total": ""}


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


class TestCsvAdapter:

    def test_read_bytes(self):
        rows = list(CsvSourceAdapter().read(CSV_TEXT.encode()))
        assert len(rows) == 2
        assert rows[0] == {
            "item name": "Resistance Band",
            "category": "Non-Consumable",
            "type": "Physiotherapy",
            "total quantity": "10",
        }

    def test_read_path(self):
        with tempfile.NamedTemporaryFile("w", suffix=".csv", delete=False, encoding="utf-8") as f:
            f.write(CSV_TEXT)
            path = Path(f.name)
        try:
            assert len(list(CsvSourceAdapter().read(path))) == 2
            assert len(list(CsvSourceAdapter().read(str(path)))) == 2
        finally:
            path.unlink()

    def test_bom_stripped(self):
        rows = list(CsvSourceAdapter().read(("\ufeff" + CSV_TEXT).encode("utf-8")))
        assert "item name" in rows[0]

    def test_caller_stream_left_open(self):
        stream = io.BytesIO(CSV_TEXT.encode())
        list(CsvSourceAdapter().read(stream))
        assert not stream.closed

    def test_delimiter_and_skip_rows(self):
        text = "Stock export\nname;total\nBand;4\n"
        rows = list(CsvSourceAdapter().read(text.encode(), {"delimiter": ";", "skip_rows": 1}))
        assert rows == [{"name": "Band", "total": "4"}]

    def test_empty_file(self):
        assert list(CsvSourceAdapter().read(b"")) == []

    def test_probe(self):
        probe = CsvSourceAdapter().probe(CSV_TEXT.encode())
        assert probe.row_count == 2
        assert probe.columns == ("item name", "category", "type", "total quantity")
        assert len(probe.sample_rows) == 2
        assert probe.encoding == "utf-8-sig"

    def test_probe_header_only(self):
        probe = CsvSourceAdapter().probe(b"name,total\n")
        assert probe.row_count == 0
        assert probe.columns == ("name", "total")

    def test_probe_samples_capped(self):
        text = "name\n" + "".join(f"item{i}\n" for i in range(12))
        probe = CsvSourceAdapter().probe(text.encode())
        assert probe.row_count == 12
        assert len(probe.sample_rows) == 5


# ---------------------------------------------------------------------------
# XLSX
# ---------------------------------------------------------------------------


class TestXlsxAdapter:

    def test_read_first_sheet(self):
        data = _xlsx_bytes(
            [
                ["Item Name", "Category", "Total Quantity"],
                ["Resistance Band", "Non-Consumable", 10],
                [None, None, None],
                ["Syringe", "Consumable", 50.0],
            ]
        )
        rows = list(XlsxSourceAdapter().read(data))
        assert rows == [
            {"item name": "Resistance Band", "category": "Non-Consumable", "total quantity": "10"},
            {"item name": "Syringe", "category": "Consumable", "total quantity": "50"},
        ]

    def test_sheet_by_name_and_index(self):
        data = _xlsx_bytes(
            [["name"], ["first"]],
            extra_sheet=("Second", [["name"], ["second"]]),
        )
        assert list(XlsxSourceAdapter().read(data, {"sheet": "Second"})) == [{"name": "second"}]
        assert list(XlsxSourceAdapter().read(data, {"sheet": 1})) == [{"name": "second"}]

    def test_probe_reports_sheet(self):
        data = _xlsx_bytes([["Name", "Total"], ["Band", 3]], title="Inventory")
        probe = XlsxSourceAdapter().probe(data)
        assert probe.sheet_name == "Inventory"
        assert probe.columns == ("name", "total")
        assert probe.row_count == 1

    def test_not_a_workbook(self):
        with pytest.raises(ValidationError):
            list(XlsxSourceAdapter().read(b"definitely not a zip file"))

    @pytest.mark.parametrize("sheet", ["Missing", 3])
    def test_unknown_sheet(self, sheet):
        data = _xlsx_bytes([["name"], ["first"]], title="Stock")
        with pytest.raises(ValidationError) as exc_info:
            list(XlsxSourceAdapter().read(data, {"sheet": sheet}))
        assert "Stock" in str(exc_info.value)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


class TestAdapterForFilename:

    def test_xlsx(self):
        assert isinstance(adapter_for_filename("Stock.XLSX"), XlsxSourceAdapter)

    def test_csv_and_unknown_default_to_csv(self):
        assert isinstance(adapter_for_filename("stock.csv"), CsvSourceAdapter)
        assert isinstance(adapter_for_filename("stock.txt"), CsvSourceAdapter)

    def test_legacy_xls_rejected(self):
        with pytest.raises(UnsupportedSourceError):
            adapter_for_filename("old.xls")
