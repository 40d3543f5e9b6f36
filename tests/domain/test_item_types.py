"""Tests for the frozen catalog, ledger and projection dataclasses."""

from dataclasses import FrozenInstanceError, replace
from datetime import datetime, timezone

import pytest

from inventory_kernel.domain.types import (
    DepartmentTag,
    InventoryProjection,
    IssueRecord,
    IssueStatus,
    Item,
    ItemCategory,
    ItemProjection,
    ReturnEvent,
)

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _item(**overrides) -> Item:
    values = dict(
        id="item-1",
        name="Resistance Band",
        category=ItemCategory.NON_CONSUMABLE,
        department_tag=DepartmentTag.PHYSIOTHERAPY,
        declared_total_quantity=10,
    )
    values.update(overrides)
    return Item(**values)


def _record(**overrides) -> IssueRecord:
    values = dict(
        id="rec-1",
        item_id="item-1",
        quantity=4,
        issued_to="staff-a",
        issued_by="admin-1",
        item_category_snapshot=ItemCategory.NON_CONSUMABLE,
        status=IssueStatus.ACKNOWLEDGED,
    )
    values.update(overrides)
    return IssueRecord(**values)


class TestItem:

    def test_frozen(self):
        item = _item()
        with pytest.raises(FrozenInstanceError):
            item.name = "Other"  # type: ignore[misc]

    def test_counters_default_to_zero(self):
        item = _item()
        assert item.stored_issued_quantity == 0
        assert item.stored_returned_quantity == 0
        assert item.version == 0

    def test_is_consumable(self):
        assert _item(category=ItemCategory.CONSUMABLE).is_consumable
        assert not _item().is_consumable


class TestIssueRecord:

    def test_returned_quantity_is_sum_of_events(self):
        record = _record(
            return_events=(ReturnEvent(quantity=1), ReturnEvent(quantity=2)),
        )
        assert record.returned_quantity == 3
        assert record.outstanding_quantity == 1

    def test_no_events_means_nothing_returned(self):
        record = _record()
        assert record.returned_quantity == 0
        assert record.outstanding_quantity == 4
        assert record.returned_at is None
        assert record.returned_by is None

    def test_returned_at_and_by_follow_last_event(self):
        later = T0.replace(hour=15)
        record = _record(
            return_events=(
                ReturnEvent(quantity=1, returned_by="u1", returned_at=T0),
                ReturnEvent(quantity=1, returned_by="u2", returned_at=later),
            )
        )
        assert record.returned_at == later
        assert record.returned_by == "u2"

    def test_consumable_follows_snapshot_not_catalog(self):
        record = _record(item_category_snapshot=ItemCategory.CONSUMABLE)
        assert record.is_consumable

    def test_enums_compare_to_stored_strings(self):
        assert IssueStatus.ACKNOWLEDGED == "acknowledged"
        assert ItemCategory.NON_CONSUMABLE == "non-consumable"
        assert DepartmentTag.STRENGTH_AND_CONDITIONING.value == "Strength and Conditioning"


class TestItemProjection:

    def _projection(self, issued: int, remaining: int, total: int = 10) -> ItemProjection:
        return ItemProjection(
            item=_item(declared_total_quantity=total),
            issued_quantity=issued,
            returned_quantity=0,
            remaining_quantity=remaining,
            total_issued=issued,
            from_ledger=True,
        )

    def test_item_passthroughs(self):
        entry = self._projection(4, 6)
        assert entry.item_id == "item-1"
        assert entry.declared_total_quantity == 10

    def test_out_of_stock(self):
        assert self._projection(10, 0).out_of_stock
        assert not self._projection(9, 1).out_of_stock

    def test_over_issued(self):
        assert self._projection(12, 0).over_issued
        assert not self._projection(10, 0).over_issued


class TestInventoryProjection:

    def test_lookup_and_iteration(self):
        a = ItemProjection(_item(id="a"), 0, 0, 10, 0, False)
        b = ItemProjection(_item(id="b"), 1, 0, 9, 1, True)
        projection = InventoryProjection(entries=(a, b))

        assert len(projection) == 2
        assert "a" in projection
        assert "missing" not in projection
        assert projection["b"] is b
        assert projection.get("missing") is None
        assert [e.item_id for e in projection] == ["a", "b"]

    def test_equality_ignores_index(self):
        a = ItemProjection(_item(id="a"), 0, 0, 10, 0, False)
        assert InventoryProjection(entries=(a,)) == InventoryProjection(entries=(a,))

    def test_empty(self):
        projection = InventoryProjection()
        assert len(projection) == 0
        assert projection.orphaned_record_ids == ()

    def test_replace_rebuilds_index(self):
        a = ItemProjection(_item(id="a"), 0, 0, 10, 0, False)
        b = ItemProjection(_item(id="b"), 0, 0, 10, 0, False)
        projection = replace(InventoryProjection(entries=(a,)), entries=(b,))
        assert "b" in projection
        assert "a" not in projection
