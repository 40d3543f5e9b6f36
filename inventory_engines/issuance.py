"""
Module: inventory_engines.issuance
Responsibility:
    The issue/return state machine. Guards decide whether an issuance or a
    return may happen; planners build the new record and item values that
    the ledger service then writes in one atomic commit.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Timestamps and actors are passed in; the engine never reads a clock.

States:
    pending_acknowledgment  defined for stored data; nothing produces it and
                            nothing may leave it
    acknowledged            every new issuance starts here
    returned                terminal; further partial returns stay here
                            while units remain outstanding

Invariants enforced:
    - 0 <= returned_quantity <= quantity for every record.
    - A consumable issuance never gains a return event and never reaches
      ``returned``. Category policy lives here, not in any form layer.
    - Issue quantity never exceeds the remaining quantity of the projection
      the caller passes in.

Failure modes:
    - ValidationError        non-positive quantity
    - InsufficientStockError issue quantity above remaining
    - CategoryPolicyError    return against a consumable snapshot
    - InvalidTransitionError return from a status that does not allow it
    - OverReturnError        return quantity above outstanding
    - NothingOutstandingError force return with every unit already back
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from inventory_kernel.domain.dtos import ValidationIssue
from inventory_kernel.domain.types import (
    Actor,
    IssueRecord,
    IssueStatus,
    Item,
    ItemProjection,
    ReturnEvent,
    StaffMember,
)
from inventory_kernel.exceptions import (
    CategoryPolicyError,
    InsufficientStockError,
    InvalidTransitionError,
    NothingOutstandingError,
    OverReturnError,
    ValidationError,
)
from inventory_kernel.logging_config import get_logger

logger = get_logger("engines.issuance")

# Allowed state transitions (from -> set of valid targets)
VALID_TRANSITIONS: dict[IssueStatus, frozenset[IssueStatus]] = {
    IssueStatus.PENDING_ACKNOWLEDGMENT: frozenset(),
    IssueStatus.ACKNOWLEDGED: frozenset({IssueStatus.RETURNED}),
    IssueStatus.RETURNED: frozenset({IssueStatus.RETURNED}),
}


# =============================================================================
# Guards
# =============================================================================


def check_quantity(quantity: int, field: str = "quantity") -> None:
    """Raise ValidationError unless ``quantity`` is a positive integer."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError(
            f"{field} must be a positive integer, got {quantity!r}",
            issues=[
                ValidationIssue(
                    code="NON_POSITIVE_QUANTITY",
                    message="Quantity must be greater than zero",
                    field=field,
                    details={"value": quantity},
                )
            ],
        )


def check_issue(projection: ItemProjection, quantity: int) -> None:
    """Issue guard against a freshly reconciled projection of the item."""
    check_quantity(quantity)
    if quantity > projection.remaining_quantity:
        raise InsufficientStockError(
            projection.item_id, quantity, projection.remaining_quantity
        )


def _check_transition(record: IssueRecord, transition: str) -> None:
    if IssueStatus.RETURNED not in VALID_TRANSITIONS.get(record.status, frozenset()):
        raise InvalidTransitionError(record.id, record.status.value, transition)


def check_return(record: IssueRecord, quantity: int) -> None:
    """Return guard. Category policy is checked before anything else."""
    if record.is_consumable:
        raise CategoryPolicyError(record.id, record.item_name)
    check_quantity(quantity)
    _check_transition(record, "return")
    if quantity > record.outstanding_quantity:
        raise OverReturnError(record.id, quantity, record.outstanding_quantity)


def force_return_quantity(record: IssueRecord) -> int:
    """
    Quantity an admin force return appends: the whole outstanding remainder.

    Same guards as a normal return; a record with nothing outstanding
    cannot be force-returned.
    """
    if record.is_consumable:
        raise CategoryPolicyError(record.id, record.item_name)
    _check_transition(record, "force return")
    outstanding = record.outstanding_quantity
    if outstanding <= 0:
        raise NothingOutstandingError(record.id)
    return outstanding


# =============================================================================
# Planners
# =============================================================================


def plan_issue(
    *,
    record_id: str,
    item: Item,
    quantity: int,
    staff: StaffMember,
    actor: Actor,
    now: datetime,
    remarks: str | None = None,
) -> tuple[IssueRecord, Item]:
    """
    New acknowledged record plus the item with its issued counter bumped.

    The record snapshots the item's category, name and department so later
    catalog edits never change how the record is treated.
    """
    record = IssueRecord(
        id=record_id,
        item_id=item.id,
        quantity=quantity,
        issued_to=staff.id,
        issued_by=actor.id,
        item_category_snapshot=item.category,
        status=IssueStatus.ACKNOWLEDGED,
        item_name=item.name,
        item_department_tag=item.department_tag,
        issued_to_name=staff.user_name,
        issued_to_email=staff.user_email or None,
        issued_by_name=actor.name,
        remarks=(remarks or "").strip() or None,
        created_at=now,
        updated_at=now,
        acknowledged_at=now,
    )
    updated_item = replace(
        item,
        stored_issued_quantity=item.stored_issued_quantity + quantity,
        updated_at=now,
        updated_by=actor.id,
    )
    return record, updated_item


def plan_return(
    *,
    record: IssueRecord,
    item: Item,
    quantity: int,
    actor: Actor,
    now: datetime,
    forced: bool = False,
) -> tuple[IssueRecord, Item]:
    """
    Record with one more return event plus the item with its counters moved.

    Guards must have passed; this only builds values.
    """
    event = ReturnEvent(quantity=quantity, returned_by=actor.id, returned_at=now, forced=forced)
    updated_record = replace(
        record,
        return_events=record.return_events + (event,),
        status=IssueStatus.RETURNED,
        updated_at=now,
    )
    updated_item = replace(
        item,
        stored_returned_quantity=item.stored_returned_quantity + quantity,
        stored_issued_quantity=max(0, item.stored_issued_quantity - quantity),
        updated_at=now,
        updated_by=actor.id,
    )
    logger.debug(
        "return_planned",
        extra={
            "record_id": record.id,
            "quantity": quantity,
            "forced": forced,
            "outstanding_after": updated_record.outstanding_quantity,
        },
    )
    return updated_record, updated_item
