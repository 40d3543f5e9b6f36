"""
inventory_services -- Package init and public API.

Responsibility:
    Stateful orchestration that composes the pure engines with document
    stores and settings. This is the only layer that reads
    ``inventory_config``.

Architecture position:
    Dependency direction:
        inventory_services/ -> inventory_engines/   (allowed)
        inventory_services/ -> inventory_kernel/    (allowed)
        inventory_services/ -> inventory_ingestion/ (allowed)
        inventory_services/ -> inventory_config/    (allowed)
        inventory_engines/  -> inventory_services/  (FORBIDDEN)
        inventory_kernel/   -> inventory_services/  (FORBIDDEN)
"""

from inventory_services.inventory_service import InventoryService
from inventory_services.reconciliation_service import ReconciliationCoordinator

__all__ = [
    "InventoryService",
    "ReconciliationCoordinator",
]
