"""
Document codec: domain dataclasses <-> stored field dicts.

Stored documents keep the camelCase field names the clinic's collections
have always used (``totalQuantity``, ``issuedQuantity``, ``itemCategory``...)
so existing data decodes unchanged. Decoding is lenient the same way the
dashboards always were: missing numbers read as 0, unknown categories read
as non-consumable, unknown statuses as pending acknowledgment.

Return sub-ledger:
    Records are written with an append-only ``returnEvents`` list plus the
    derived ``returnedQuantity`` / ``returnedAt`` / ``returnedBy`` for older
    readers. A legacy document with ``returnedQuantity > 0`` and no event
    list decodes as one synthesized legacy event.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping

from inventory_kernel.domain.normalize import (
    normalize_department,
    normalize_status,
    parse_category,
    parse_int,
)
from inventory_kernel.domain.types import (
    IssueRecord,
    Item,
    ItemCategory,
    ReturnEvent,
    StaffMember,
)


def _ts(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_ts(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def _str_or_none(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


# =============================================================================
# Item
# =============================================================================


def item_to_fields(item: Item) -> dict[str, Any]:
    return {
        "name": item.name,
        "category": item.category.value,
        "type": item.department_tag.value,
        "totalQuantity": item.declared_total_quantity,
        "issuedQuantity": item.stored_issued_quantity,
        "returnedQuantity": item.stored_returned_quantity,
        "createdBy": item.created_by,
        "createdByName": item.created_by_name,
        "createdAt": _ts(item.created_at),
        "updatedAt": _ts(item.updated_at),
        "updatedBy": item.updated_by,
    }


def item_from_document(doc_id: str, fields: Mapping[str, Any], version: int = 0) -> Item:
    return Item(
        id=doc_id,
        name=str(fields.get("name") or ""),
        category=parse_category(fields.get("category")) or ItemCategory.NON_CONSUMABLE,
        department_tag=normalize_department(fields.get("type")),
        declared_total_quantity=parse_int(fields.get("totalQuantity")),
        stored_issued_quantity=parse_int(fields.get("issuedQuantity")),
        stored_returned_quantity=parse_int(fields.get("returnedQuantity")),
        created_by=_str_or_none(fields.get("createdBy")),
        created_by_name=_str_or_none(fields.get("createdByName")),
        created_at=_parse_ts(fields.get("createdAt")),
        updated_at=_parse_ts(fields.get("updatedAt")),
        updated_by=_str_or_none(fields.get("updatedBy")),
        version=version,
    )


# =============================================================================
# Issue record
# =============================================================================


def _event_to_fields(event: ReturnEvent) -> dict[str, Any]:
    return {
        "quantity": event.quantity,
        "returnedBy": event.returned_by,
        "returnedAt": _ts(event.returned_at),
        "forced": event.forced,
        "legacy": event.legacy,
    }


def _event_from_fields(fields: Mapping[str, Any]) -> ReturnEvent:
    return ReturnEvent(
        quantity=parse_int(fields.get("quantity")),
        returned_by=_str_or_none(fields.get("returnedBy")),
        returned_at=_parse_ts(fields.get("returnedAt")),
        forced=bool(fields.get("forced", False)),
        legacy=bool(fields.get("legacy", False)),
    )


def record_to_fields(record: IssueRecord) -> dict[str, Any]:
    return {
        "itemId": record.item_id,
        "itemName": record.item_name,
        "itemType": record.item_department_tag.value if record.item_department_tag else None,
        "itemCategory": record.item_category_snapshot.value,
        "quantity": record.quantity,
        "issuedBy": record.issued_by,
        "issuedByName": record.issued_by_name,
        "issuedTo": record.issued_to,
        "issuedToName": record.issued_to_name,
        "issuedToEmail": record.issued_to_email,
        "status": record.status.value,
        "acknowledgedAt": _ts(record.acknowledged_at),
        "returnEvents": [_event_to_fields(e) for e in record.return_events],
        "returnedQuantity": record.returned_quantity,
        "returnedAt": _ts(record.returned_at),
        "returnedBy": record.returned_by,
        "remarks": record.remarks,
        "createdAt": _ts(record.created_at),
        "updatedAt": _ts(record.updated_at),
    }


def record_from_document(
    doc_id: str,
    fields: Mapping[str, Any],
    version: int = 0,
    category_lookup: Callable[[str], ItemCategory | None] | None = None,
) -> IssueRecord:
    """
    Decode an issue record.

    The category snapshot falls back to ``category_lookup(item_id)`` (the
    live catalog) for records written before snapshots existed, then to
    non-consumable.
    """
    item_id = str(fields.get("itemId") or "")
    category = parse_category(fields.get("itemCategory"))
    if category is None and category_lookup is not None and item_id:
        category = category_lookup(item_id)
    if category is None:
        category = ItemCategory.NON_CONSUMABLE

    raw_events = fields.get("returnEvents")
    if isinstance(raw_events, list):
        events = tuple(_event_from_fields(e) for e in raw_events if isinstance(e, Mapping))
    else:
        legacy_qty = parse_int(fields.get("returnedQuantity"))
        events = (
            (
                ReturnEvent(
                    quantity=legacy_qty,
                    returned_by=_str_or_none(fields.get("returnedBy")),
                    returned_at=_parse_ts(fields.get("returnedAt")),
                    legacy=True,
                ),
            )
            if legacy_qty > 0
            else ()
        )

    item_type = fields.get("itemType")
    return IssueRecord(
        id=doc_id,
        item_id=item_id,
        quantity=parse_int(fields.get("quantity")),
        issued_to=str(fields.get("issuedTo") or ""),
        issued_by=str(fields.get("issuedBy") or ""),
        item_category_snapshot=category,
        status=normalize_status(fields.get("status")),
        item_name=str(fields.get("itemName") or ""),
        item_department_tag=normalize_department(item_type) if item_type else None,
        issued_to_name=str(fields.get("issuedToName") or ""),
        issued_to_email=_str_or_none(fields.get("issuedToEmail")),
        issued_by_name=str(fields.get("issuedByName") or ""),
        return_events=events,
        remarks=_str_or_none(fields.get("remarks")),
        created_at=_parse_ts(fields.get("createdAt")),
        updated_at=_parse_ts(fields.get("updatedAt")),
        acknowledged_at=_parse_ts(fields.get("acknowledgedAt")),
        version=version,
    )


# =============================================================================
# Staff
# =============================================================================


def staff_from_document(doc_id: str, fields: Mapping[str, Any]) -> StaffMember:
    return StaffMember(
        id=doc_id,
        user_name=str(fields.get("userName") or ""),
        user_email=str(fields.get("userEmail") or ""),
        role=str(fields.get("role") or ""),
        status=str(fields.get("status") or ""),
    )

