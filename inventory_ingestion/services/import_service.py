"""
Import service: parse -> normalize -> validate -> commit.

Orchestrates source adapters, the mapping engine, row validators and the
item promoter. ``preview()`` touches no store; ``commit()`` writes valid
rows in chunks no larger than the store's atomic write limit.

Partial application:
    Each chunk is committed before the next one is built. If a chunk
    fails, chunks already committed stay committed (no rollback) and the
    raised ``ImportCommitError`` lists the item ids that landed.

Uses structured logging (LogContext, get_logger("ingestion.*")).
"""

from __future__ import annotations

import csv
from typing import Any, Sequence
from uuid import uuid4

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import ValidationIssue
from inventory_kernel.domain.types import Actor
from inventory_kernel.exceptions import (
    ConcurrencyError,
    ImportCommitError,
    PersistenceError,
    ValidationError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.store.base import DocumentStore

from inventory_ingestion.adapters import Source, SourceAdapter, SourceProbe, adapter_for_filename
from inventory_ingestion.domain.types import ColumnMapping, ImportPreview, ImportResult, ImportRow
from inventory_ingestion.mapping.engine import map_rows
from inventory_ingestion.promoters import ItemPromoter, RowPromoter

logger = get_logger("ingestion.import_service")


def _chunks(rows: Sequence[ImportRow], size: int) -> list[Sequence[ImportRow]]:
    return [rows[i : i + size] for i in range(0, len(rows), size)]


class ImportService:
    """
    Bulk item import.

    Args:
        store: Document store receiving the created items.
        clock: Source of created/updated timestamps.
        collection: Items collection name.
        batch_size: Preferred rows per commit; capped at the store's
            ``max_batch_size``.
        columns: Header synonyms per import field.
    """

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock | None = None,
        collection: str = "inventoryItems",
        batch_size: int = 500,
        columns: ColumnMapping | None = None,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.collection = collection
        self.batch_size = batch_size
        self.columns = columns or ColumnMapping()
        self.promoter: RowPromoter = ItemPromoter(collection)

    @property
    def chunk_size(self) -> int:
        return max(1, min(self.batch_size, self.store.max_batch_size))

    # ------------------------------------------------------------------
    # Parse
    # ------------------------------------------------------------------

    def _adapter(self, filename: str) -> SourceAdapter:
        return adapter_for_filename(filename)

    def _read(self, adapter: SourceAdapter, source: Source, filename: str, options: dict[str, Any]) -> list[dict[str, str]]:
        try:
            return list(adapter.read(source, options))
        except (UnicodeDecodeError, csv.Error) as e:
            logger.warning("import_parse_failed", extra={"source_filename": filename, "error": str(e)})
            raise ValidationError(
                f"Failed to parse {filename}: {e}",
                issues=[ValidationIssue("PARSE_ERROR", str(e), details={"source_filename": filename})],
            ) from e

    def probe(self, source: Source, filename: str, options: dict[str, Any] | None = None) -> SourceProbe:
        """Row count, columns and sample rows without mapping or validation."""
        return self._adapter(filename).probe(source, options or {})

    def preview(self, source: Source, filename: str, options: dict[str, Any] | None = None) -> ImportPreview:
        """
        Parse and validate a source without writing anything.

        Raises:
            UnsupportedSourceError: legacy ``.xls`` workbook.
            ValidationError: the file cannot be parsed.
        """
        adapter = self._adapter(filename)
        raw_rows = self._read(adapter, source, filename, options or {})

        columns: list[str] = []
        for raw in raw_rows:
            for key in raw:
                if key not in columns:
                    columns.append(key)

        rows = map_rows(raw_rows, self.columns)
        preview = ImportPreview(source_filename=filename, rows=tuple(rows), columns=tuple(columns))
        logger.info(
            "import_previewed",
            extra={
                "source_filename": filename,
                "total_rows": preview.total_count,
                "valid_rows": preview.valid_count,
                "invalid_rows": preview.invalid_count,
            },
        )
        return preview

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def commit(self, preview: ImportPreview, actor: Actor) -> ImportResult:
        """
        Create one item per valid row.

        Raises:
            ValidationError: the preview has no valid rows.
            ImportCommitError: a chunk failed; earlier chunks stay committed.
            BatchLimitError: the store rejected a chunk as too large.
        """
        valid = preview.valid_rows
        if not valid:
            raise ValidationError(
                "No valid rows to import",
                issues=[ValidationIssue("NO_VALID_ROWS", "No valid rows to import")],
            )

        batch_id = uuid4().hex
        now = self.clock.now()
        committed: list[str] = []
        batches = 0

        with LogContext.bind(actor_id=actor.id, batch_id=batch_id):
            logger.info(
                "import_commit_started",
                extra={
                    "source_filename": preview.source_filename,
                    "valid_rows": len(valid),
                    "chunk_size": self.chunk_size,
                },
            )
            for chunk in _chunks(valid, self.chunk_size):
                writes = [
                    self.promoter.to_write(row, self.store.new_id(self.collection), actor, now)
                    for row in chunk
                ]
                try:
                    self.store.commit(writes)
                except (PersistenceError, ConcurrencyError) as e:
                    logger.error(
                        "import_chunk_failed",
                        extra={"batches_committed": batches, "items_committed": len(committed)},
                        exc_info=True,
                    )
                    raise ImportCommitError(committed, batches, str(e)) from e
                committed.extend(w.doc_id for w in writes)
                batches += 1
                logger.debug("import_chunk_committed", extra={"chunk": batches, "rows": len(writes)})

            logger.info(
                "import_committed",
                extra={"items_created": len(committed), "batches_committed": batches},
            )

        return ImportResult(
            created_ids=tuple(committed),
            batches_committed=batches,
            skipped_rows=tuple(r.row_index for r in preview.invalid_rows),
        )

    def import_source(
        self,
        source: Source,
        filename: str,
        actor: Actor,
        options: dict[str, Any] | None = None,
    ) -> tuple[ImportPreview, ImportResult]:
        """Preview and commit in one call."""
        preview = self.preview(source, filename, options)
        return preview, self.commit(preview, actor)
