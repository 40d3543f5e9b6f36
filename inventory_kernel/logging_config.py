"""
Structured JSON logging for the inventory kernel.

Every record is one JSON object per line carrying the timestamp, level,
logger and message, the operation-scoped fields held in ``LogContext``
(actor, item, record, import batch...), any ``extra`` passed at the call
site, and, for exceptions, the kernel error's code and structured
attributes.

Usage:
    logger = get_logger("services.ledger")
    with LogContext.bind(actor_id=actor.id, item_id=item.id):
        logger.info("item_issued", extra={"quantity": 4})
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Iterator
from uuid import UUID

LOGGER_NAMESPACE = "inventory_kernel"

# ---------------------------------------------------------------------------
# Operation-scoped fields
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS = (
    "correlation_id",
    "actor_id",
    "producer",
    "item_id",
    "record_id",
    "batch_id",
)

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"inventory_log_{name}", default=None) for name in _CONTEXT_FIELDS
}


def _var(name: str) -> ContextVar[str | None]:
    try:
        return _context_vars[name]
    except KeyError:
        raise TypeError(f"Unknown log context field: {name}") from None


class LogContext:
    """
    Log fields scoped to the current thread or task.

    ``set`` and ``clear`` change the fields for the rest of the context;
    ``bind`` changes them for one ``with`` block and then puts the previous
    values back. ``None`` never overwrites a field.
    """

    @staticmethod
    def set(**fields: str | None) -> None:
        for name, value in fields.items():
            var = _var(name)
            if value is not None:
                var.set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        values = ((name, var.get()) for name, var in _context_vars.items())
        return {name: value for name, value in values if value is not None}

    @staticmethod
    def clear() -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        tokens = [
            (var, var.set(value))
            for var, value in ((_var(name), value) for name, value in fields.items())
            if value is not None
        ]
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

# Attributes every LogRecord has; anything else on a record came from ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # Kernel errors keep their context (item_id, requested...) as attributes
    fields.update(
        (f"exc_{name}", value)
        for name, value in vars(exc).items()
        if not name.startswith("_") and name not in ("args", "code")
    )
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            payload.update(_exception_fields(exc))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger ``inventory_kernel.<name>``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_setup_lock = threading.Lock()
_handler_installed = False


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install one JSON handler on the ``inventory_kernel`` logger.

    Only the first call has an effect until ``reset_logging()``. Records do
    not propagate to the root logger.
    """
    global _handler_installed
    with _setup_lock:
        if _handler_installed:
            return
        _handler_installed = True

    out = handler or logging.StreamHandler(stream or sys.stderr)
    out.setFormatter(StructuredFormatter())
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.setLevel(level)
    namespace.propagate = False
    namespace.addHandler(out)


def reset_logging() -> None:
    """Remove installed handlers so ``configure_logging`` runs again. Tests only."""
    global _handler_installed
    with _setup_lock:
        _handler_installed = False
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.handlers.clear()
    namespace.setLevel(logging.WARNING)
