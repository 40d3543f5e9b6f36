"""
Settings loader (``inventory_config.loader``).

Responsibility
--------------
Reads the packaged ``defaults.yaml`` and an optional site file, merges the
site file over the defaults, and parses the result into the frozen
``inventory_config.schema`` dataclasses.

Invariants enforced
-------------------
* Unknown sections and keys are rejected, so a typo never silently falls
  back to a default.
* Every parsed object is a frozen dataclass from ``schema.py``.

Failure modes
-------------
* Missing site file  -> ``FileNotFoundError`` propagates.
* Malformed YAML or a value of the wrong type  -> ``ConfigurationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    CollectionNames,
    ColumnSynonyms,
    ImportSettings,
    InventorySettings,
    LedgerSettings,
    StoreSettings,
)
from inventory_kernel.exceptions import ConfigurationError

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its top-level mapping.

    Raises:
        FileNotFoundError: if the file does not exist.
        ConfigurationError: if the YAML is invalid or not a mapping.
    """
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping")
    return data


def merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursive merge; mappings merge key by key, everything else replaces."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _section(data: dict[str, Any], name: str, allowed: tuple[str, ...]) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{name}' must be a mapping")
    unknown = sorted(set(section) - set(allowed))
    if unknown:
        raise ConfigurationError(f"Unknown keys in '{name}': {', '.join(unknown)}")
    return section


def _str(section: dict[str, Any], key: str, where: str) -> str:
    value = section[key]
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"{where}.{key} must be a non-empty string")
    return value.strip()


def _bool(section: dict[str, Any], key: str, where: str) -> bool:
    value = section[key]
    if not isinstance(value, bool):
        raise ConfigurationError(f"{where}.{key} must be true or false")
    return value


def _positive_int(section: dict[str, Any], key: str, where: str) -> int:
    value = section[key]
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{where}.{key} must be a positive integer")
    return value


def _names(value: Any, where: str) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not value:
        raise ConfigurationError(f"{where} must be a non-empty list of column names")
    names = []
    for v in value:
        if not isinstance(v, str) or not v.strip():
            raise ConfigurationError(f"{where} contains a blank column name")
        names.append(v.strip().lower())
    return tuple(names)


def parse_settings(data: dict[str, Any]) -> InventorySettings:
    """Parse a fully merged settings mapping."""
    unknown = sorted(set(data) - {"collections", "ledger", "imports", "store"})
    if unknown:
        raise ConfigurationError(f"Unknown settings sections: {', '.join(unknown)}")

    coll = _section(data, "collections", ("items", "issues", "staff"))
    ledger = _section(data, "ledger", ("optimistic_concurrency", "active_staff_status"))
    imports = _section(data, "imports", ("batch_size", "columns"))
    store = _section(data, "store", ("database_url", "max_batch_size", "echo"))
    columns = _section(imports, "columns", tuple(ColumnSynonyms.__dataclass_fields__))

    return InventorySettings(
        collections=CollectionNames(
            items=_str(coll, "items", "collections"),
            issues=_str(coll, "issues", "collections"),
            staff=_str(coll, "staff", "collections"),
        ),
        ledger=LedgerSettings(
            optimistic_concurrency=_bool(ledger, "optimistic_concurrency", "ledger"),
            active_staff_status=_str(ledger, "active_staff_status", "ledger"),
        ),
        imports=ImportSettings(
            batch_size=_positive_int(imports, "batch_size", "imports"),
            columns=ColumnSynonyms(
                **{k: _names(v, f"imports.columns.{k}") for k, v in columns.items()}
            ),
        ),
        store=StoreSettings(
            database_url=_str(store, "database_url", "store"),
            max_batch_size=_positive_int(store, "max_batch_size", "store"),
            echo=_bool(store, "echo", "store"),
        ),
    )


def load_settings(path: Path | str | None = None) -> InventorySettings:
    """Load defaults, merge the site file at ``path`` (if any), and parse."""
    data = load_yaml_file(DEFAULTS_PATH)
    if path is not None:
        data = merge(data, load_yaml_file(Path(path)))
    return parse_settings(data)
