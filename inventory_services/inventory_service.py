"""
InventoryService -- composition root and facade for embedders.

Responsibility:
    Wires one document store, one clock and one ``InventorySettings`` into
    the catalog, ledger, staff directory, import service and reconciliation
    coordinator, and exposes the operations a form layer calls.

Architecture position:
    Services -- stateful orchestration over engines + kernel. The only
    place settings are translated into kernel constructor arguments.

Usage:
    service = InventoryService.from_settings(get_active_config())
    service.start()
    item = service.create_item(CreateItemRequest(...), actor)
    service.projection()[item.id].remaining_quantity
"""

from __future__ import annotations

from typing import Any, Callable

from inventory_config import InventorySettings, get_active_config
from inventory_ingestion.adapters import Source, SourceProbe
from inventory_ingestion.domain.types import ColumnMapping, ImportPreview, ImportResult
from inventory_ingestion.services.import_service import ImportService
from inventory_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import (
    CreateItemRequest,
    IssueRequest,
    ReturnRequest,
    UpdateItemRequest,
)
from inventory_kernel.domain.types import (
    Actor,
    DepartmentTag,
    InventoryProjection,
    IssueRecord,
    Item,
    ItemCategory,
    ItemProjection,
    StaffMember,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.selectors.inventory_selector import (
    filter_items,
    has_issue_history,
    out_of_stock_consumables,
    returnable_records,
)
from inventory_kernel.services.catalog_service import CatalogService
from inventory_kernel.services.ledger_service import LedgerService
from inventory_kernel.services.staff_directory import StaffDirectory
from inventory_kernel.store.base import DocumentStore
from inventory_kernel.store.sql import SqlDocumentStore
from inventory_services.reconciliation_service import ReconciliationCoordinator

logger = get_logger("services.inventory")


def column_mapping(settings: InventorySettings) -> ColumnMapping:
    """Import header synonyms from settings."""
    c = settings.imports.columns
    return ColumnMapping(
        item_name=c.item_name,
        category=c.category,
        department_tag=c.department_tag,
        total_quantity=c.total_quantity,
        issued_quantity=c.issued_quantity,
        returned_quantity=c.returned_quantity,
        remaining_quantity=c.remaining_quantity,
    )


class InventoryService:
    """Facade over catalog, ledger, import and reconciliation."""

    def __init__(
        self,
        store: DocumentStore,
        settings: InventorySettings | None = None,
        clock: Clock | None = None,
    ):
        self.settings = settings or get_active_config()
        self.store = store
        self.clock = clock or SystemClock()

        names = self.settings.collections
        occ = self.settings.ledger.optimistic_concurrency
        self.staff = StaffDirectory(
            store, names.staff, self.settings.ledger.active_staff_status
        )
        self.catalog = CatalogService(store, self.clock, names.items, occ)
        self.ledger = LedgerService(
            store, self.staff, self.clock, names.items, names.issues, occ
        )
        self.imports = ImportService(
            store,
            self.clock,
            names.items,
            self.settings.imports.batch_size,
            column_mapping(self.settings),
        )
        self.coordinator = ReconciliationCoordinator(store, names.items, names.issues)

    @classmethod
    def from_settings(
        cls,
        settings: InventorySettings | None = None,
        clock: Clock | None = None,
    ) -> "InventoryService":
        """Build over a ``SqlDocumentStore`` at ``settings.store.database_url``."""
        settings = settings or get_active_config()
        engine = init_engine_from_url(settings.store.database_url, echo=settings.store.echo)
        create_tables(engine)
        store = SqlDocumentStore(get_session_factory(), settings.store.max_batch_size)
        return cls(store, settings, clock)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> "InventoryService":
        self.coordinator.start()
        return self

    def stop(self) -> None:
        self.coordinator.stop()

    def __enter__(self) -> "InventoryService":
        return self.start()

    def __exit__(self, *exc: Any) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def create_item(self, request: CreateItemRequest, actor: Actor) -> Item:
        return self.catalog.create_item(request, actor)

    def update_item(self, item_id: str, request: UpdateItemRequest, actor: Actor) -> Item:
        return self.catalog.update_item(item_id, request, actor)

    def delete_item(self, item_id: str, actor: Actor | None = None) -> None:
        self.catalog.delete_item(item_id, actor)

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def issue(self, request: IssueRequest, actor: Actor) -> IssueRecord:
        return self.ledger.record_issuance(request, actor)

    def return_item(self, request: ReturnRequest, actor: Actor) -> IssueRecord:
        return self.ledger.record_return(request, actor)

    def force_return(self, record_id: str, actor: Actor) -> IssueRecord:
        return self.ledger.force_return(record_id, actor)

    def update_remarks(self, record_id: str, text: str | None) -> IssueRecord:
        return self.ledger.update_remarks(record_id, text)

    def active_staff(self) -> list[StaffMember]:
        return self.staff.list_active()

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def probe_import(self, source: Source, filename: str) -> SourceProbe:
        return self.imports.probe(source, filename)

    def preview_import(self, source: Source, filename: str) -> ImportPreview:
        return self.imports.preview(source, filename)

    def commit_import(self, preview: ImportPreview, actor: Actor) -> ImportResult:
        return self.imports.commit(preview, actor)

    # ------------------------------------------------------------------
    # Projection and derived views
    # ------------------------------------------------------------------

    def projection(self) -> InventoryProjection:
        """Latest published projection (empty until ``start()``)."""
        return self.coordinator.current()

    def subscribe(self, consumer: Callable[[InventoryProjection], None]) -> Callable[[], None]:
        return self.coordinator.subscribe(consumer)

    def search_items(
        self,
        search: str = "",
        category: ItemCategory | None = None,
        department_tag: DepartmentTag | None = None,
    ) -> list[ItemProjection]:
        return filter_items(self.projection(), search, category, department_tag)

    def out_of_stock_consumables(self) -> list[ItemProjection]:
        return out_of_stock_consumables(self.projection())

    def returnable_records(self) -> list[IssueRecord]:
        return returnable_records(self.coordinator.records())

    def has_issue_history(self, item_id: str) -> bool:
        return has_issue_history(self.coordinator.records(), item_id)
