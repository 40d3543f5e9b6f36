"""Mapping engine: header synonyms, normalization and row indices."""

from inventory_ingestion.domain.types import ColumnMapping
from inventory_ingestion.mapping.engine import FIRST_DATA_ROW, map_row, map_rows, pick
from inventory_kernel.domain.types import DepartmentTag, ItemCategory


class TestPick:

    def test_first_non_empty_synonym_wins(self):
        raw = {"item name": "", "name": "Band", "item": "Other"}
        assert pick(raw, ("item name", "itemname", "name", "item")) == "Band"

    def test_nothing_matches(self):
        assert pick({"x": "1"}, ("name",)) == ""


class TestMapRow:

    def test_full_row(self):
        row = map_row(
            {
                "item name": " Kettlebell ",
                "category": "Non Consumable",
                "type": "strength & conditioning",
                "total quantity": "8",
                "issued": "3",
                "returned": "1",
                "remaining": "5",
            },
            2,
            ColumnMapping(),
        )
        assert row.row_index == 2
        assert row.item_name == "Kettlebell"
        assert row.category is ItemCategory.NON_CONSUMABLE
        assert row.department_tag is DepartmentTag.STRENGTH_AND_CONDITIONING
        assert (row.total_quantity, row.issued_quantity, row.returned_quantity) == (8, 3, 1)
        assert row.remaining_quantity == 5
        assert row.is_valid

    def test_synonym_headers(self):
        row = map_row({"itemname": "Gauze", "cat": "consumables", "quantity": "40 boxes"}, 3, ColumnMapping())
        assert row.item_name == "Gauze"
        assert row.category is ItemCategory.CONSUMABLE
        assert row.department_tag is DepartmentTag.PHYSIOTHERAPY
        assert row.total_quantity == 40
        assert row.issued_quantity == 0

    def test_missing_name_flagged_not_dropped(self):
        row = map_row({"total": "4"}, 5, ColumnMapping())
        assert not row.is_valid
        assert row.error_messages == ["Item name is required"]

    def test_custom_mapping(self):
        columns = ColumnMapping(item_name=("equipment",), total_quantity=("stock",))
        row = map_row({"equipment": "Bike", "stock": "2"}, 2, columns)
        assert row.item_name == "Bike"
        assert row.total_quantity == 2


class TestMapRows:

    def test_indices_start_after_header(self):
        rows = map_rows([{"name": "A", "total": "1"}, {"name": "B", "total": "2"}])
        assert FIRST_DATA_ROW == 2
        assert [r.row_index for r in rows] == [2, 3]

    def test_default_mapping_used(self):
        (row,) = map_rows([{"item": "Cones", "total": "12"}])
        assert row.item_name == "Cones"
        assert row.total_quantity == 12
