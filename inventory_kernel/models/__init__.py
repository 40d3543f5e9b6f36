"""ORM models for the SQL document store."""

from inventory_kernel.models.document import DocumentModel

__all__ = ["DocumentModel"]
