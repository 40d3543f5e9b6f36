"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (form handlers, import previews, admin tooling) need to tell an
over-issue apart from a consumable return attempt without parsing message
text. Every error therefore:
  1. Has its own exception class (catch by type, not message)
  2. Carries a ``code`` attribute (machine-readable, API-safe)
  3. Carries structured data (item ids, requested vs. available quantities)

Example:
    try:
        ledger.record_return(request, actor)
    except CategoryPolicyError as e:
        notify(f"{e.item_name} is consumable and cannot be returned")
    except OverReturnError as e:
        notify(f"Only {e.outstanding} left to return")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InventoryKernelError (base)
    |
    +-- ValidationError
    |   +-- UnsupportedSourceError
    |
    +-- QuantityConflictError
    |   +-- InsufficientStockError
    |   +-- OverReturnError
    |   |   +-- NothingOutstandingError
    |   +-- ShrinkBelowIssuedError
    |   +-- OutstandingIssuanceError
    |
    +-- CategoryPolicyError
    |
    +-- ReferentialError
    |   +-- ItemNotFoundError
    |   +-- IssueRecordNotFoundError
    |   +-- StaffNotFoundError
    |
    +-- InvalidTransitionError
    |
    +-- PersistenceError
    |   +-- ImportCommitError
    |
    +-- BatchLimitError
    |
    +-- ConcurrencyError
    |   +-- OptimisticLockError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                      | When Raised
--------------------------|----------------------------------------------------
VALIDATION_ERROR          | Malformed or missing input, before any store access
UNSUPPORTED_SOURCE        | Import file encoding not readable
QUANTITY_CONFLICT         | Generic quantity invariant violation
INSUFFICIENT_STOCK        | Issue quantity exceeds projected remaining
OVER_RETURN               | Return quantity exceeds outstanding on the record
SHRINK_BELOW_ISSUED       | Declared total edited below stored issued quantity
OUTSTANDING_ISSUANCE      | Delete attempted while units are checked out
CATEGORY_POLICY           | Return attempted on a consumable issuance
ITEM_NOT_FOUND            | Item id does not resolve
ISSUE_RECORD_NOT_FOUND    | Issue record id does not resolve
STAFF_NOT_FOUND           | Staff id unknown or not active
INVALID_TRANSITION        | Issue record status does not allow the operation
PERSISTENCE_ERROR         | Underlying store write failed
IMPORT_COMMIT_FAILED      | An import chunk failed after earlier chunks landed
BATCH_LIMIT_EXCEEDED      | A write set larger than the store accepts atomically
OPTIMISTIC_LOCK_CONFLICT  | Item changed between read and compare-and-swap write
CONFIGURATION_ERROR       | Settings file malformed

Validation and category errors are raised before anything is read or
written. Quantity and referential errors are raised after one read and
before the write. Persistence errors are raised once and never retried.
"""

from __future__ import annotations

from typing import Any, Sequence


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses define a ``code`` class attribute for machine-readable
    identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"


# Validation


class ValidationError(InventoryKernelError):
    """Input failed local validation. No store access has happened."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, issues: Sequence[Any] = ()):
        self.issues = tuple(issues)
        super().__init__(message)


class UnsupportedSourceError(ValidationError):
    """Import source has an encoding no adapter can read."""

    code: str = "UNSUPPORTED_SOURCE"

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Unsupported import file: {filename}")


# Quantity


class QuantityConflictError(InventoryKernelError):
    """Requested operation would violate a quantity invariant."""

    code: str = "QUANTITY_CONFLICT"


class InsufficientStockError(QuantityConflictError):
    """Issue quantity exceeds the item's projected remaining quantity."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: str, requested: int, available: int):
        self.item_id = item_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Only {available} units of item {item_id} available, {requested} requested"
        )


class OverReturnError(QuantityConflictError):
    """Return quantity exceeds what is still outstanding on the record."""

    code: str = "OVER_RETURN"

    def __init__(self, record_id: str, requested: int, outstanding: int):
        self.record_id = record_id
        self.requested = requested
        self.outstanding = outstanding
        super().__init__(
            f"Cannot return {requested} on issue record {record_id}: "
            f"{outstanding} outstanding"
        )


class NothingOutstandingError(OverReturnError):
    """Force return on a record whose units have all come back."""

    code: str = "NOTHING_OUTSTANDING"

    def __init__(self, record_id: str):
        self.record_id = record_id
        self.requested = 0
        self.outstanding = 0
        QuantityConflictError.__init__(
            self, f"All items have already been returned on issue record {record_id}"
        )


class ShrinkBelowIssuedError(QuantityConflictError):
    """Declared total edited below the quantity currently checked out."""

    code: str = "SHRINK_BELOW_ISSUED"

    def __init__(self, item_id: str, requested_total: int, issued: int):
        self.item_id = item_id
        self.requested_total = requested_total
        self.issued = issued
        super().__init__(
            f"Total quantity for item {item_id} cannot be less than issued quantity "
            f"({issued}), got {requested_total}"
        )


class OutstandingIssuanceError(QuantityConflictError):
    """Item cannot be deleted while units are issued."""

    code: str = "OUTSTANDING_ISSUANCE"

    def __init__(self, item_id: str, issued: int):
        self.item_id = item_id
        self.issued = issued
        super().__init__(
            f"Cannot delete item {item_id}: {issued} units are currently issued"
        )


# Category policy


class CategoryPolicyError(InventoryKernelError):
    """Return-type operation attempted on a consumable issuance."""

    code: str = "CATEGORY_POLICY"

    def __init__(self, record_id: str, item_name: str = ""):
        self.record_id = record_id
        self.item_name = item_name
        super().__init__(
            f"Issue record {record_id} is for a consumable item and cannot be returned"
        )


# Referential


class ReferentialError(InventoryKernelError):
    """A referenced identity does not resolve."""

    code: str = "REFERENTIAL_ERROR"


class ItemNotFoundError(ReferentialError):
    """Item with given id was not found."""

    code: str = "ITEM_NOT_FOUND"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class IssueRecordNotFoundError(ReferentialError):
    """Issue record with given id was not found."""

    code: str = "ISSUE_RECORD_NOT_FOUND"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Issue record not found: {record_id}")


class StaffNotFoundError(ReferentialError):
    """Staff id is unknown or the staff member is not active."""

    code: str = "STAFF_NOT_FOUND"

    def __init__(self, staff_id: str):
        self.staff_id = staff_id
        super().__init__(f"Active staff member not found: {staff_id}")


# State machine


class InvalidTransitionError(InventoryKernelError):
    """The record's current status does not allow the requested transition."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, record_id: str, status: str, transition: str):
        self.record_id = record_id
        self.status = status
        self.transition = transition
        super().__init__(
            f"Cannot {transition} issue record {record_id} in status {status}"
        )


# Persistence


class PersistenceError(InventoryKernelError):
    """The underlying store failed to apply a write."""

    code: str = "PERSISTENCE_ERROR"


class ImportCommitError(PersistenceError):
    """
    An import chunk failed to commit.

    Chunks committed before the failure stay committed; ``committed_ids``
    lists the items that landed.
    """

    code: str = "IMPORT_COMMIT_FAILED"

    def __init__(self, committed_ids: Sequence[str], batches_committed: int, cause: str):
        self.committed_ids = tuple(committed_ids)
        self.batches_committed = batches_committed
        super().__init__(
            f"Import failed after {batches_committed} committed batch(es) "
            f"({len(self.committed_ids)} items): {cause}"
        )


class BatchLimitError(InventoryKernelError):
    """Write set exceeds the store's atomic write limit."""

    code: str = "BATCH_LIMIT_EXCEEDED"

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Write set of {size} exceeds store batch limit of {limit}")


# Concurrency


class ConcurrencyError(InventoryKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Document version changed between read and write."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, collection: str, doc_id: str, expected: int, actual: int | None):
        self.collection = collection
        self.doc_id = doc_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Optimistic lock conflict on {collection}/{doc_id}: "
            f"expected version {expected}, found {actual}"
        )


# Configuration


class ConfigurationError(InventoryKernelError):
    """Settings could not be loaded or are malformed."""

    code: str = "CONFIGURATION_ERROR"
