"""
Bulk import service: preview, chunked commit, partial failure.

The store's atomic write limit caps the chunk size; a chunk that fails
leaves earlier chunks committed and reports them on the error.
"""

import io

import openpyxl
import pytest

from inventory_ingestion.services.import_service import ImportService
from inventory_kernel.domain.types import ItemCategory
from inventory_kernel.exceptions import (
    ImportCommitError,
    PersistenceError,
    UnsupportedSourceError,
    ValidationError,
)
from inventory_kernel.store.memory import InMemoryDocumentStore

ITEMS = "inventoryItems"

MIXED_CSV = (
    "Item Name,Category,Type,Total Quantity,Issued,Returned\n"
    "Resistance Band,Non-Consumable,Physiotherapy,10,3,1\n"
    "Foam Roller,Non-Consumable,Biomechanics,4,3,5\n"
    "Kinesio Tape,Consumable,Biomechanics,2,5,0\n"
).encode()


def _csv(n: int) -> bytes:
    lines = ["Item Name,Category,Total Quantity"]
    lines += [f"Item {i},Non-Consumable,{i + 1}" for i in range(n)]
    return ("\n".join(lines) + "\n").encode()


class FlakyStore(InMemoryDocumentStore):
    """Fails the Nth commit after arming."""

    def __init__(self, max_batch_size: int):
        super().__init__(max_batch_size)
        self.fail_on: int | None = None
        self.calls = 0

    def _before_apply(self, writes):
        if self.fail_on is None:
            return
        self.calls += 1
        if self.calls == self.fail_on:
            raise PersistenceError("write quota exceeded")


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------


class TestPreview:

    def test_mixed_rows_flagged(self, import_service, store):
        preview = import_service.preview(MIXED_CSV, "stock.csv")
        assert preview.total_count == 3
        assert preview.valid_count == 1
        assert [r.row_index for r in preview.invalid_rows] == [3, 4]
        assert preview.invalid_rows[0].error_messages == [
            "Returned quantity cannot exceed issued quantity"
        ]
        assert preview.invalid_rows[1].error_messages == [
            "Total quantity cannot be less than issued quantity"
        ]
        assert store.query(ITEMS) == ()

    def test_columns_reported(self, import_service):
        preview = import_service.preview(MIXED_CSV, "stock.csv")
        assert preview.columns == ("item name", "category", "type", "total quantity", "issued", "returned")

    def test_blank_name_row_kept_and_flagged(self, import_service):
        data = b"Item Name,Total Quantity\n,5\nBand,2\n"
        preview = import_service.preview(data, "stock.csv")
        assert preview.total_count == 2
        assert preview.rows[0].error_messages == ["Item name is required"]
        assert preview.rows[1].is_valid

    def test_xlsx_preview(self, import_service):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["Name", "Cat", "Total"])
        ws.append(["Syringe", "Consumable", 50])
        buf = io.BytesIO()
        wb.save(buf)
        preview = import_service.preview(buf.getvalue(), "stock.xlsx")
        (row,) = preview.rows
        assert row.category is ItemCategory.CONSUMABLE
        assert row.total_quantity == 50

    def test_legacy_xls_rejected(self, import_service):
        with pytest.raises(UnsupportedSourceError):
            import_service.preview(b"whatever", "stock.xls")

    def test_undecodable_csv_is_parse_error(self, import_service):
        with pytest.raises(ValidationError) as exc_info:
            import_service.preview(b"name\n\xff\xfe\xfa broken\n", "stock.csv")
        assert exc_info.value.issues[0].code == "PARSE_ERROR"

    def test_probe_does_not_map(self, import_service):
        probe = import_service.probe(MIXED_CSV, "stock.csv")
        assert probe.row_count == 3
        assert "issued" in probe.columns


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------


class TestCommit:

    def test_only_valid_rows_written(self, import_service, store, actor):
        preview, result = import_service.import_source(MIXED_CSV, "stock.csv", actor)
        assert len(result.created_ids) == 1
        assert result.skipped_rows == (3, 4)
        (doc,) = store.query(ITEMS)
        assert doc.fields["name"] == "Resistance Band"
        assert doc.fields["issuedQuantity"] == 3
        assert doc.fields["returnedQuantity"] == 1

    def test_chunks_respect_store_limit(self, clock, actor):
        store = InMemoryDocumentStore(max_batch_size=2)
        service = ImportService(store, clock, ITEMS, batch_size=500)
        assert service.chunk_size == 2
        _, result = service.import_source(_csv(5), "stock.csv", actor)
        assert result.batches_committed == 3
        assert len(store.query(ITEMS)) == 5

    def test_preferred_batch_size_used_when_smaller(self, clock, actor):
        service = ImportService(InMemoryDocumentStore(), clock, ITEMS, batch_size=2)
        _, result = service.import_source(_csv(4), "stock.csv", actor)
        assert result.batches_committed == 2

    def test_no_valid_rows(self, import_service, actor):
        preview = import_service.preview(b"Item Name,Total\n,4\n", "stock.csv")
        with pytest.raises(ValidationError) as exc_info:
            import_service.commit(preview, actor)
        assert exc_info.value.issues[0].code == "NO_VALID_ROWS"

    def test_failed_chunk_keeps_earlier_chunks(self, clock, actor):
        store = FlakyStore(max_batch_size=2)
        service = ImportService(store, clock, ITEMS)
        preview = service.preview(_csv(5), "stock.csv")
        store.fail_on = 2

        with pytest.raises(ImportCommitError) as exc_info:
            service.commit(preview, actor)

        err = exc_info.value
        assert err.batches_committed == 1
        assert len(err.committed_ids) == 2
        assert {d.id for d in store.query(ITEMS)} == set(err.committed_ids)

    def test_commit_logs_carry_batch_id(self, import_service, actor, captured_logs):
        import_service.import_source(_csv(2), "stock.csv", actor)
        logs = captured_logs()
        done = next(r for r in logs if r["message"] == "import_committed")
        started = next(r for r in logs if r["message"] == "import_commit_started")
        assert done["batch_id"] == started["batch_id"]
        assert done["actor_id"] == actor.id
        assert done["items_created"] == 2


class TestImportedItemsReconcile:

    def test_counters_used_until_ledger_exists(self, inventory, actor):
        _, result = inventory.imports.import_source(MIXED_CSV, "stock.csv", actor)
        entry = inventory.projection()[result.created_ids[0]]
        assert entry.from_ledger is False
        assert entry.issued_quantity == 3
        assert entry.returned_quantity == 1
        assert entry.remaining_quantity == 7
