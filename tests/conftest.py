"""
Pytest fixtures for the inventory test suite.

Provides:
- Structured logging configured once per session, LogContext cleared per test
- captured_logs for asserting on structured log events
- Deterministic clock, in-memory and SQLite-backed document stores
- Seeded staff directory and wired catalog / ledger / import services
"""

import json
import logging
from io import StringIO

import pytest

from inventory_config import InventorySettings, reset_active_config
from inventory_ingestion.services.import_service import ImportService
from inventory_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from inventory_kernel.domain.clock import DeterministicClock
from inventory_kernel.domain.dtos import CreateItemRequest
from inventory_kernel.domain.types import Actor, DepartmentTag, ItemCategory
from inventory_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from inventory_kernel.services.catalog_service import CatalogService
from inventory_kernel.services.ledger_service import LedgerService
from inventory_kernel.services.staff_directory import StaffDirectory
from inventory_kernel.store.memory import InMemoryDocumentStore
from inventory_kernel.store.sql import SqlDocumentStore
from inventory_services.inventory_service import InventoryService

ITEMS = "inventoryItems"
ISSUES = "inventoryIssues"
STAFF = "staff"

ADMIN = Actor(id="admin-1", name="Clinic Admin")

STAFF_A = "staff-a"
STAFF_B = "staff-b"
STAFF_INACTIVE = "staff-gone"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture(autouse=True)
def _reset_config():
    reset_active_config()
    yield
    reset_active_config()


@pytest.fixture
def captured_logs():
    """
    Capture inventory_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.record_issuance(...)
            logs = captured_logs()
            assert any(r["message"] == "item_issued" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("inventory_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Time and stores
# =============================================================================


@pytest.fixture
def clock():
    return DeterministicClock()


@pytest.fixture
def actor():
    return ADMIN


def seed_staff(store) -> None:
    store.put(STAFF, STAFF_A, {"userName": "Asha Patel", "userEmail": "asha@clinic.test", "role": "Physio", "status": "Active"})
    store.put(STAFF, STAFF_B, {"userName": "Ben Okafor", "userEmail": "ben@clinic.test", "role": "S&C Coach", "status": "Active"})
    store.put(STAFF, STAFF_INACTIVE, {"userName": "Cara Lin", "userEmail": "cara@clinic.test", "role": "Physio", "status": "Inactive"})


@pytest.fixture
def store():
    """In-memory store with the staff collection seeded."""
    s = InMemoryDocumentStore()
    seed_staff(s)
    return s


@pytest.fixture
def sql_store():
    """SQLite-backed SQL store (in-memory database, one shared connection)."""
    engine = init_engine_from_url("sqlite://")
    create_tables(engine)
    s = SqlDocumentStore(get_session_factory())
    yield s
    reset_engine()


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def staff_directory(store):
    return StaffDirectory(store, STAFF)


@pytest.fixture
def catalog(store, clock):
    return CatalogService(store, clock, ITEMS)


@pytest.fixture
def ledger(store, staff_directory, clock):
    return LedgerService(store, staff_directory, clock, ITEMS, ISSUES)


@pytest.fixture
def import_service(store, clock):
    return ImportService(store, clock, ITEMS)


@pytest.fixture
def inventory(store, clock):
    """Started facade over the seeded in-memory store with default settings."""
    service = InventoryService(store, InventorySettings(), clock)
    service.start()
    yield service
    service.stop()


@pytest.fixture
def make_item(catalog, actor):
    """Create a catalog item; keyword overrides for category and department."""

    def _make(
        name: str = "Resistance Band",
        total: int = 10,
        category: ItemCategory = ItemCategory.NON_CONSUMABLE,
        department_tag: DepartmentTag = DepartmentTag.PHYSIOTHERAPY,
    ):
        return catalog.create_item(
            CreateItemRequest(
                name=name,
                category=category,
                declared_total_quantity=total,
                department_tag=department_tag,
            ),
            actor,
        )

    return _make
