"""
activation_config.assembler -- composes YAML fragments into one CatalogSource.

Responsibility:
    Product owners edit small YAML fragments.  This module composes them
    into a single ``CatalogSource``.  Runtime only ever sees the compiled
    ``ModuleCatalog``; this module is strictly startup/test tooling.

Architecture position:
    Configuration -- called by ``activation_config.get_active_catalog()``
    and by tests that build catalog fixtures.  The assembler reads the
    filesystem (I/O boundary); the resulting ``CatalogSource`` is a pure,
    frozen data structure.

Fragment structure::

    sets/hotel-suite-v1/
    +-- root.yaml       # catalog_id, name, version, status
    +-- modules.yaml    # Module definitions and their requires lists
    +-- bundles.yaml    # Preset bundles (optional)
    +-- plans.yaml      # Subscription plan module lists (optional)

Invariants enforced:
    - ``root.yaml`` and ``modules.yaml`` must exist in every fragment
      directory.
    - A deterministic SHA-256 checksum is computed over all assembled data;
      it becomes the catalog revision recorded against tenant active sets.
    - All parsed structures are immutable frozen dataclasses.

Failure modes:
    - ``CatalogAssemblyError`` -- required fragments missing or mandatory
      fields absent or malformed.
    - ``yaml.YAMLError`` (propagated from loader) -- invalid YAML syntax.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from activation_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_bundle,
    parse_identity,
    parse_module,
    parse_plan,
)
from activation_config.schema import BundleSpec, CatalogSource, PlanSpec
from activation_kernel.exceptions import CatalogAssemblyError


def assemble_from_directory(fragment_dir: Path) -> CatalogSource:
    """Compose fragments from a directory into one CatalogSource.

    Preconditions:
        - ``fragment_dir`` is an existing directory containing
          ``root.yaml`` and ``modules.yaml``.

    Postconditions:
        - Returns a frozen ``CatalogSource`` with a deterministic SHA-256
          ``checksum``.
        - Modules, bundles and plans keep their authored order.

    Raises:
        CatalogAssemblyError: If required fragments are missing or
            malformed.
    """
    if not fragment_dir.is_dir():
        raise CatalogAssemblyError(f"Fragment directory not found: {fragment_dir}")

    # 1. Load root.yaml (required)
    root_path = fragment_dir / "root.yaml"
    if not root_path.exists():
        raise CatalogAssemblyError(f"root.yaml not found in {fragment_dir}")
    root_data = load_yaml_file(root_path)

    # 2. Load modules.yaml (required)
    modules_path = fragment_dir / "modules.yaml"
    if not modules_path.exists():
        raise CatalogAssemblyError(f"modules.yaml not found in {fragment_dir}")
    modules_data = load_yaml_file(modules_path)

    # 3. Load bundles.yaml (optional)
    bundles_path = fragment_dir / "bundles.yaml"
    bundles_data: dict[str, Any] = {}
    if bundles_path.exists():
        bundles_data = load_yaml_file(bundles_path)

    # 4. Load plans.yaml (optional)
    plans_path = fragment_dir / "plans.yaml"
    plans_data: dict[str, Any] = {}
    if plans_path.exists():
        plans_data = load_yaml_file(plans_path)

    # 5. Parse
    try:
        identity = parse_identity(root_data)
        modules = tuple(parse_module(m) for m in modules_data.get("modules") or [])
        bundles: tuple[BundleSpec, ...] = tuple(
            parse_bundle(b) for b in bundles_data.get("bundles") or []
        )
        plans: tuple[PlanSpec, ...] = tuple(
            parse_plan(p) for p in plans_data.get("plans") or []
        )
    except KeyError as exc:
        raise CatalogAssemblyError(
            f"Missing required field {exc} in {fragment_dir}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise CatalogAssemblyError(f"Malformed fragment in {fragment_dir}: {exc}") from exc

    # 6. Compute checksum over all assembled data
    checksum = compute_checksum(
        {
            "root": root_data,
            "modules": modules_data.get("modules") or [],
            "bundles": bundles_data.get("bundles") or [],
            "plans": plans_data.get("plans") or [],
        }
    )

    # INVARIANT: checksum must be a non-empty SHA-256 hex digest.
    assert checksum and len(checksum) == 64, (
        f"Checksum must be a 64-char SHA-256 hex digest, got {checksum!r}"
    )

    return CatalogSource(
        identity=identity,
        modules=modules,
        bundles=bundles,
        plans=plans,
        checksum=checksum,
    )
