"""
inventory_kernel.domain -- Pure types, request structs, normalization and codec.

ZERO I/O.
"""

from inventory_kernel.domain.dtos import (
    CreateItemRequest,
    IssueRequest,
    ReturnRequest,
    UpdateItemRequest,
    ValidationIssue,
)
from inventory_kernel.domain.types import (
    Actor,
    DepartmentTag,
    InventoryProjection,
    IssueRecord,
    IssueStatus,
    Item,
    ItemCategory,
    ItemProjection,
    ReturnEvent,
    StaffMember,
)

__all__ = [
    "Actor",
    "CreateItemRequest",
    "DepartmentTag",
    "InventoryProjection",
    "IssueRecord",
    "IssueRequest",
    "IssueStatus",
    "Item",
    "ItemCategory",
    "ItemProjection",
    "ReturnEvent",
    "ReturnRequest",
    "StaffMember",
    "UpdateItemRequest",
    "ValidationIssue",
]
