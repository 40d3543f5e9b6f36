"""
Module: inventory_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import inventory_kernel.domain, inventory_kernel.exceptions and
    inventory_kernel.logging_config. MUST NOT import inventory_services.

Invariants enforced:
    - Purity: engines never read a clock; callers pass ``now`` explicitly.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Reconciliation runs are traced via ``@traced_engine`` (see
    ``inventory_engines.tracer``), emitting INVENTORY_ENGINE_TRACE records.

Usage:
    from inventory_engines import reconcile, check_issue, plan_issue
"""

from inventory_engines.issuance import (
    VALID_TRANSITIONS,
    check_issue,
    check_quantity,
    check_return,
    force_return_quantity,
    plan_issue,
    plan_return,
)
from inventory_engines.reconciliation import project_item, reconcile
from inventory_engines.tracer import traced_engine

__all__ = [
    "VALID_TRANSITIONS",
    "check_issue",
    "check_quantity",
    "check_return",
    "force_return_quantity",
    "plan_issue",
    "plan_return",
    "project_item",
    "reconcile",
    "traced_engine",
]
