"""
DocumentModel -- one row per stored document.

Backs ``SqlDocumentStore``. Every collection (inventoryItems,
inventoryIssues, staff) shares the table; ``(collection, doc_id)`` is unique
and ``version`` drives compare-and-swap writes.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase


class DocumentModel(TrackedBase):
    """Stored document (collection, doc_id, version, JSON fields)."""

    __tablename__ = "documents"

    __table_args__ = (
        UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),
        Index("ix_documents_collection", "collection"),
    )

    collection: Mapped[str] = mapped_column(String(100), nullable=False)
    doc_id: Mapped[str] = mapped_column(String(100), nullable=False)
    version: Mapped[int] = mapped_column(nullable=False, default=1)
    fields: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
