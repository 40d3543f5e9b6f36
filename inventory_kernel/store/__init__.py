"""Document stores: protocol, in-memory and SQLAlchemy implementations."""

from inventory_kernel.store.base import (
    DEFAULT_MAX_BATCH_SIZE,
    DeleteOp,
    Document,
    DocumentStore,
    PutOp,
    Subscription,
    WriteOp,
)
from inventory_kernel.store.memory import InMemoryDocumentStore
from inventory_kernel.store.sql import SqlDocumentStore

__all__ = [
    "DEFAULT_MAX_BATCH_SIZE",
    "DeleteOp",
    "Document",
    "DocumentStore",
    "InMemoryDocumentStore",
    "PutOp",
    "SqlDocumentStore",
    "Subscription",
    "WriteOp",
]
