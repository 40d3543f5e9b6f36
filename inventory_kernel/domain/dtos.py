"""
Request structs and validation issues.

The form layer hands these to the catalog and ledger services. They carry
already-typed values; the services apply the checks that protect the
quantity invariants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from inventory_kernel.domain.types import DepartmentTag, ItemCategory


@dataclass(frozen=True)
class ValidationIssue:
    """
    A single validation problem.

    Contract:
        Carries a machine-readable code, human-readable message, optional
        field name and optional details dict. Used for import row errors and
        as the payload of ``ValidationError``.

    Non-goals:
        Does NOT raise -- it IS the error representation.
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True)
class CreateItemRequest:
    name: str
    category: ItemCategory | None
    declared_total_quantity: int
    department_tag: DepartmentTag = DepartmentTag.PHYSIOTHERAPY


@dataclass(frozen=True)
class UpdateItemRequest:
    """Fields left as None keep their current value."""

    name: str | None = None
    category: ItemCategory | None = None
    department_tag: DepartmentTag | None = None
    declared_total_quantity: int | None = None


@dataclass(frozen=True)
class IssueRequest:
    item_id: str
    quantity: int
    issued_to: str
    remarks: str | None = None


@dataclass(frozen=True)
class ReturnRequest:
    record_id: str
    quantity: int
