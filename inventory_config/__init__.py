"""
inventory_config -- single public entrypoint for inventory settings.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains settings.
    The first call loads the packaged defaults merged with an optional site
    file and caches the resulting ``InventorySettings``; later calls return
    the cached object until ``reset_active_config()``.

Architecture position:
    Configuration sits above ``inventory_kernel``. The kernel never imports
    this package; ``inventory_services`` translates settings into kernel
    constructor arguments.

Failure modes:
    - ``FileNotFoundError`` -- the site file does not exist.
    - ``ConfigurationError`` -- malformed YAML or an invalid value.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from inventory_config.loader import load_settings
from inventory_config.schema import (
    CollectionNames,
    ColumnSynonyms,
    ImportSettings,
    InventorySettings,
    LedgerSettings,
    StoreSettings,
)

_logger = logging.getLogger("inventory_kernel.config")

_lock = threading.Lock()
_active: InventorySettings | None = None


def get_active_config(config_path: Path | str | None = None) -> InventorySettings:
    """
    Return the active settings, loading them on first use.

    ``config_path`` is only honoured by the call that loads; pass it once at
    start-up (or call ``reset_active_config()`` first to reload).
    """
    global _active
    with _lock:
        if _active is None:
            _active = load_settings(config_path)
            _logger.info(
                "INVENTORY_CONFIG_TRACE",
                extra={
                    "trace_type": "INVENTORY_CONFIG_TRACE",
                    "config_path": str(config_path) if config_path else None,
                    "items_collection": _active.collections.items,
                    "issues_collection": _active.collections.issues,
                    "optimistic_concurrency": _active.ledger.optimistic_concurrency,
                    "import_batch_size": _active.imports.batch_size,
                },
            )
        return _active


def reset_active_config() -> None:
    """Drop the cached settings. FOR TESTING ONLY."""
    global _active
    with _lock:
        _active = None


__all__ = [
    "CollectionNames",
    "ColumnSynonyms",
    "ImportSettings",
    "InventorySettings",
    "LedgerSettings",
    "StoreSettings",
    "get_active_config",
    "load_settings",
    "reset_active_config",
]
