"""
Staff directory lookups.

Only staff whose status matches the configured active status (``"Active"``
by default) can receive stock. Lookups are one-shot ``query`` reads; the
directory keeps no cache.
"""

from __future__ import annotations

from inventory_kernel.domain.documents import staff_from_document
from inventory_kernel.domain.types import StaffMember
from inventory_kernel.exceptions import StaffNotFoundError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.store.base import Document, DocumentStore

logger = get_logger("services.staff")


class StaffDirectory:
    """Read-only view over the staff collection."""

    def __init__(
        self,
        store: DocumentStore,
        collection: str = "staff",
        active_status: str = "Active",
    ):
        self.store = store
        self.collection = collection
        self.active_status = active_status

    def _is_active(self, doc: Document) -> bool:
        return doc.fields.get("status") == self.active_status

    def resolve(self, staff_id: str) -> StaffMember:
        """
        Resolve an issue target.

        Raises:
            StaffNotFoundError: unknown id, or the member is not active.
        """
        matches = self.store.query(
            self.collection,
            lambda d: d.id == staff_id and self._is_active(d),
        )
        if not matches:
            logger.info("staff_not_resolved", extra={"staff_id": staff_id})
            raise StaffNotFoundError(staff_id)
        return staff_from_document(matches[0].id, matches[0].fields)

    def list_active(self) -> list[StaffMember]:
        """Active staff sorted by name, as offered in the issue form."""
        docs = self.store.query(self.collection, self._is_active)
        members = [staff_from_document(d.id, d.fields) for d in docs]
        return sorted(members, key=lambda m: m.user_name.lower())
