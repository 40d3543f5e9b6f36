"""
Declarative base for the SQL document store.

Kernel > DB. Imports nothing from models/, store/ or services/.

Rows carry a surrogate integer key; documents are addressed by
``(collection, doc_id)`` on the model itself. Timestamps are stored
timezone-aware and filled by the database.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
    }


class TrackedBase(Base):
    """Surrogate key plus created_at / updated_at set by the database."""

    __abstract__ = True

    row_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )
