"""
Promoter protocol.

A promoter turns one valid ``ImportRow`` into the store write that creates
the live entity. Promoters build writes only; ``ImportService`` decides how
writes are chunked and committed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from inventory_kernel.domain.types import Actor
from inventory_kernel.store.base import PutOp

from inventory_ingestion.domain.types import ImportRow


class RowPromoter(Protocol):
    """Protocol for turning an import row into a create write."""

    collection: str

    def to_write(self, row: ImportRow, doc_id: str, actor: Actor, now: datetime) -> PutOp:
        """Create write for a valid row. Must not be called with an invalid row."""
        ...
