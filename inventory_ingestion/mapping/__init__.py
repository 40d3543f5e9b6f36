"""Column mapping from raw source rows to normalized import rows."""

from inventory_ingestion.mapping.engine import FIRST_DATA_ROW, map_row, map_rows, pick

__all__ = ["FIRST_DATA_ROW", "map_row", "map_rows", "pick"]
