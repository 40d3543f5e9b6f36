"""
BaseService -- abstract base for the kernel's store-backed services.

Responsibility:
    Holds the document store and clock every catalog and ledger service
    needs. Services translate between store documents and frozen domain
    types; callers only ever see domain types.

Architecture position:
    Kernel > Services -- imperative shell around the pure engines.

Invariants enforced:
    - Services never hold an in-process lock across store I/O.
    - Each public write is a single ``put``/``delete``/``commit`` call, so a
      failed write leaves nothing applied.
"""

from abc import ABC

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.store.base import DocumentStore


class BaseService(ABC):
    """
    Abstract base class for kernel services.

    Contract:
        Accepts a ``DocumentStore`` and an optional ``Clock``. When no clock
        is given the system clock is used.

    Non-goals:
        - Does NOT cache documents; every read goes to the store.
    """

    def __init__(self, store: DocumentStore, clock: Clock | None = None):
        self.store = store
        self.clock = clock or SystemClock()
