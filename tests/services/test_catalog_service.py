"""
CatalogService tests.

Create, edit and delete with the shrink and delete guards; validation
failures are raised before anything is written.
"""

import pytest

from inventory_kernel.domain.dtos import CreateItemRequest, IssueRequest, UpdateItemRequest
from inventory_kernel.domain.types import DepartmentTag, ItemCategory
from inventory_kernel.exceptions import (
    ItemNotFoundError,
    OptimisticLockError,
    OutstandingIssuanceError,
    QuantityConflictError,
    ShrinkBelowIssuedError,
    ValidationError,
)
from inventory_kernel.services.catalog_service import CatalogService


class TestCreateItem:

    def test_creates_with_zero_counters(self, catalog, actor, clock):
        item = catalog.create_item(
            CreateItemRequest(
                name="  Resistance Band ",
                category=ItemCategory.NON_CONSUMABLE,
                declared_total_quantity=10,
                department_tag=DepartmentTag.PHYSIOTHERAPY,
            ),
            actor,
        )
        assert item.name == "Resistance Band"
        assert item.stored_issued_quantity == 0
        assert item.stored_returned_quantity == 0
        assert item.created_by == "admin-1"
        assert item.created_by_name == "Clinic Admin"
        assert item.created_at == clock.now()
        assert item.version == 1
        assert catalog.get_item(item.id) == item

    def test_all_problems_reported_together(self, catalog, actor, store):
        with pytest.raises(ValidationError) as exc_info:
            catalog.create_item(CreateItemRequest(name=" ", category=None, declared_total_quantity=0), actor)
        codes = [i.code for i in exc_info.value.issues]
        fields = [i.field for i in exc_info.value.issues]
        assert codes == ["REQUIRED_FIELD", "REQUIRED_FIELD", "NON_POSITIVE_QUANTITY"]
        assert fields == ["name", "category", "declared_total_quantity"]
        assert store.query("inventoryItems") == ()

    @pytest.mark.parametrize("total", [0, -3])
    def test_non_positive_total(self, catalog, actor, total):
        with pytest.raises(ValidationError):
            catalog.create_item(
                CreateItemRequest("Tape", ItemCategory.CONSUMABLE, total), actor
            )

    def test_logs_creation(self, catalog, actor, captured_logs):
        item = catalog.create_item(CreateItemRequest("Tape", ItemCategory.CONSUMABLE, 5), actor)
        created = [r for r in captured_logs() if r["message"] == "item_created"]
        assert created[0]["item_id"] == item.id
        assert created[0]["actor_id"] == "admin-1"
        assert created[0]["category"] == "consumable"


class TestReads:

    def test_get_unknown(self, catalog):
        with pytest.raises(ItemNotFoundError):
            catalog.get_item("missing")

    def test_find_unknown(self, catalog):
        assert catalog.find_item("missing") is None

    def test_list_items(self, catalog, make_item):
        a = make_item("A")
        b = make_item("B")
        assert [i.id for i in catalog.list_items()] == [a.id, b.id]


class TestUpdateItem:

    def test_partial_update_keeps_other_fields(self, catalog, actor, make_item, clock):
        item = make_item()
        clock.advance(60)
        updated = catalog.update_item(
            item.id, UpdateItemRequest(department_tag=DepartmentTag.BIOMECHANICS), actor
        )
        assert updated.department_tag is DepartmentTag.BIOMECHANICS
        assert updated.name == item.name
        assert updated.declared_total_quantity == 10
        assert updated.updated_at == clock.now()
        assert updated.created_at == item.created_at
        assert updated.version == 2

    def test_grow_total(self, catalog, actor, make_item):
        item = make_item(total=10)
        assert catalog.update_item(item.id, UpdateItemRequest(declared_total_quantity=25), actor).declared_total_quantity == 25

    def test_shrink_below_issued_rejected(self, catalog, ledger, actor, make_item):
        item = make_item(total=10)
        ledger.record_issuance(IssueRequest(item.id, 4, "staff-a"), actor)
        with pytest.raises(ShrinkBelowIssuedError) as exc_info:
            catalog.update_item(item.id, UpdateItemRequest(declared_total_quantity=3), actor)
        assert isinstance(exc_info.value, QuantityConflictError)
        assert exc_info.value.issued == 4
        assert catalog.get_item(item.id).declared_total_quantity == 10

    def test_shrink_to_exactly_issued(self, catalog, ledger, actor, make_item):
        item = make_item(total=10)
        ledger.record_issuance(IssueRequest(item.id, 4, "staff-a"), actor)
        updated = catalog.update_item(item.id, UpdateItemRequest(declared_total_quantity=4), actor)
        assert updated.declared_total_quantity == 4

    def test_validation_before_read(self, catalog, actor):
        # Unknown id, but validation fails first
        with pytest.raises(ValidationError):
            catalog.update_item("missing", UpdateItemRequest(name=""), actor)

    def test_unknown_item(self, catalog, actor):
        with pytest.raises(ItemNotFoundError):
            catalog.update_item("missing", UpdateItemRequest(name="X"), actor)

    def test_concurrent_edit_detected(self, store, clock, actor, make_item):
        item = make_item()
        catalog = CatalogService(store, clock)
        # Someone else writes between our read and our write
        original_get = store.get

        def racing_get(collection, doc_id):
            doc = original_get(collection, doc_id)
            store.get = original_get
            store.put(collection, doc_id, {**doc.fields, "name": "Renamed"})
            return doc

        store.get = racing_get
        with pytest.raises(OptimisticLockError):
            catalog.update_item(item.id, UpdateItemRequest(name="Mine"), actor)
        assert catalog.get_item(item.id).name == "Renamed"

    def test_last_writer_wins_without_occ(self, store, clock, actor, make_item):
        item = make_item()
        catalog = CatalogService(store, clock, optimistic_concurrency=False)
        original_get = store.get

        def racing_get(collection, doc_id):
            doc = original_get(collection, doc_id)
            store.get = original_get
            store.put(collection, doc_id, {**doc.fields, "name": "Renamed"})
            return doc

        store.get = racing_get
        catalog.update_item(item.id, UpdateItemRequest(name="Mine"), actor)
        assert catalog.get_item(item.id).name == "Mine"


class TestDeleteItem:

    def test_delete_unissued(self, catalog, actor, make_item):
        item = make_item()
        catalog.delete_item(item.id, actor)
        assert catalog.find_item(item.id) is None

    def test_delete_with_units_out_rejected(self, catalog, ledger, actor, make_item):
        item = make_item()
        ledger.record_issuance(IssueRequest(item.id, 3, "staff-a"), actor)
        with pytest.raises(OutstandingIssuanceError) as exc_info:
            catalog.delete_item(item.id, actor)
        assert exc_info.value.issued == 3
        assert catalog.find_item(item.id) is not None

    def test_delete_after_full_return(self, catalog, ledger, actor, make_item):
        item = make_item()
        record = ledger.record_issuance(IssueRequest(item.id, 3, "staff-a"), actor)
        ledger.force_return(record.id, actor)
        catalog.delete_item(item.id, actor)
        assert catalog.find_item(item.id) is None

    def test_delete_unknown(self, catalog):
        with pytest.raises(ItemNotFoundError):
            catalog.delete_item("missing")
