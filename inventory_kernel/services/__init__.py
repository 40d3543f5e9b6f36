"""Store-backed services for the inventory kernel (write side)."""

from inventory_kernel.services.catalog_service import CatalogService
from inventory_kernel.services.ledger_service import LedgerService
from inventory_kernel.services.staff_directory import StaffDirectory

__all__ = [
    "CatalogService",
    "LedgerService",
    "StaffDirectory",
]
