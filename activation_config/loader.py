"""
Catalog Loader (``activation_config.loader``).

Responsibility
--------------
Loads individual YAML fragment files and parses them into typed
``activation_config.schema`` dataclass instances.  This is startup/test
tooling only -- nothing at request time reads YAML.  The single public entry
point for runtime catalogs is ``activation_config.get_active_catalog()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Consumed by
``activation_config.assembler``.  Depends on nothing but the schema.

Invariants enforced
-------------------
* Parse errors raise ``KeyError`` / ``ValueError`` with descriptive
  messages; no silent defaults for required fields.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash used as the
  catalog revision.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* A list field given as something else  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from activation_config.lifecycle import CatalogStatus
from activation_config.schema import BundleSpec, CatalogIdentity, ModuleSpec, PlanSpec


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Preconditions:
        - ``path`` must point to an existing, readable YAML file.
    Postconditions:
        - Returns a ``dict`` (possibly empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def parse_id_list(value: Any, field_name: str) -> tuple[str, ...]:
    """Parse a YAML list of identifiers into a tuple of strings."""
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"'{field_name}' must be a list, got {value!r}")
    return tuple(str(item) for item in value)


def parse_identity(data: dict[str, Any]) -> CatalogIdentity:
    """
    Parse the ``root.yaml`` identity block.

    Raises:
        KeyError: if ``catalog_id`` or ``version`` is missing.
        ValueError: if ``status`` is not a known ``CatalogStatus``.
    """
    return CatalogIdentity(
        catalog_id=data["catalog_id"],
        name=data.get("name", data["catalog_id"]),
        version=int(data["version"]),
        status=CatalogStatus(data.get("status", CatalogStatus.DRAFT.value)),
        description=data.get("description", ""),
    )


def parse_module(data: dict[str, Any]) -> ModuleSpec:
    """
    Parse a ``ModuleSpec`` from a dict.

    Preconditions:
        - ``data`` contains ``id`` and ``name``.
    Postconditions:
        - ``short_name`` falls back to ``name`` when omitted.
    """
    return ModuleSpec(
        id=str(data["id"]),
        name=data["name"],
        short_name=data.get("short_name") or data["name"],
        description=data.get("description", ""),
        is_base=bool(data.get("is_base", False)),
        requires=parse_id_list(data.get("requires"), "requires"),
    )


def parse_bundle(data: dict[str, Any]) -> BundleSpec:
    """Parse a ``BundleSpec`` from a dict."""
    return BundleSpec(
        id=str(data["id"]),
        name=data["name"],
        modules=parse_id_list(data["modules"], "modules"),
        description=data.get("description", ""),
        use_case=data.get("use_case", ""),
        recommended=bool(data.get("recommended", False)),
    )


def parse_plan(data: dict[str, Any]) -> PlanSpec:
    """Parse a ``PlanSpec`` from a dict."""
    return PlanSpec(
        id=str(data["id"]),
        name=data["name"],
        included_modules=parse_id_list(data.get("included_modules"), "included_modules"),
        optional_modules=parse_id_list(data.get("optional_modules"), "optional_modules"),
        description=data.get("description", ""),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
