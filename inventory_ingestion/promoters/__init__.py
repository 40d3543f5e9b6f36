"""Promoters: valid import rows -> store create writes."""

from inventory_ingestion.promoters.base import RowPromoter
from inventory_ingestion.promoters.item import ItemPromoter

__all__ = ["ItemPromoter", "RowPromoter"]
