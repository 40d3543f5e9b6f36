"""
Boundary normalization of free-text classifications.

Spreadsheet cells and legacy documents spell categories and departments in
many ways ("Consumables", "NON CONSUMABLE", "psychology"). Everything is
mapped onto the closed enums here so that internal code only ever compares
enum members. The mapping is a best-effort substring heuristic: unmatched
input falls back to a default instead of failing.
"""

from __future__ import annotations

from typing import Any

from inventory_kernel.domain.types import DepartmentTag, ItemCategory, IssueStatus

# Checked in order; first hit wins.
_DEPARTMENT_KEYWORDS: tuple[tuple[tuple[str, ...], DepartmentTag], ...] = (
    (("strength", "conditioning"), DepartmentTag.STRENGTH_AND_CONDITIONING),
    (("psychological", "psychology"), DepartmentTag.PSYCHOLOGICAL),
    (("biomechanics", "biomechanic"), DepartmentTag.BIOMECHANICS),
)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def normalize_category(value: Any) -> ItemCategory:
    """'consumable' without 'non' -> CONSUMABLE; everything else NON_CONSUMABLE."""
    if isinstance(value, ItemCategory):
        return value
    text = _text(value)
    if "consumable" in text and "non" not in text:
        return ItemCategory.CONSUMABLE
    return ItemCategory.NON_CONSUMABLE


def parse_category(value: Any) -> ItemCategory | None:
    """Strict variant for stored data: exact enum value or None."""
    if isinstance(value, ItemCategory):
        return value
    try:
        return ItemCategory(_text(value))
    except ValueError:
        return None


def normalize_department(value: Any) -> DepartmentTag:
    """Substring match onto DepartmentTag; defaults to PHYSIOTHERAPY."""
    if isinstance(value, DepartmentTag):
        return value
    text = _text(value)
    for keywords, tag in _DEPARTMENT_KEYWORDS:
        if any(k in text for k in keywords):
            return tag
    return DepartmentTag.PHYSIOTHERAPY


def normalize_status(value: Any) -> IssueStatus:
    """Unknown or missing status decodes as PENDING_ACKNOWLEDGMENT."""
    if isinstance(value, IssueStatus):
        return value
    try:
        return IssueStatus(_text(value))
    except ValueError:
        return IssueStatus.PENDING_ACKNOWLEDGMENT


def parse_int(value: Any) -> int:
    """
    Lenient integer parse for spreadsheet cells.

    Takes the leading integer prefix ("12 pcs" -> 12, "3.7" -> 3, "-4" -> -4);
    anything without one is 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    text = str(value).strip()
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = ""
    for ch in text:
        if ch not in "0123456789":
            break
        digits += ch
    return sign * int(digits) if digits else 0
