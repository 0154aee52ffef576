"""
activation_config -- single public entrypoint for the module catalog.

Responsibility:
    Provides the ONLY way to obtain a catalog at runtime through
    ``get_active_catalog()``.  Returns a ``ModuleCatalog`` -- the sole
    runtime artifact.  YAML loading is internal startup/test tooling and
    never exposed to callers.

Architecture position:
    Configuration -- sits above ``activation_kernel`` and below
    ``activation_services``.  The kernel MUST NEVER import from
    ``activation_config``.

Invariants enforced:
    - Single entrypoint: all runtime catalogs flow through
      ``get_active_catalog()``.
    - Load-time validation: the source must pass ``validate_catalog_source``
      and ``ModuleCatalog.build`` before a catalog is produced.
    - Deterministic compilation: the same YAML fragments always produce
      the same catalog revision.

Failure modes:
    - ``FileNotFoundError`` -- no catalog set matches the request.
    - ``CatalogAssemblyError`` -- fragments missing, malformed, or failing
      source validation.
    - ``CatalogIntegrityError`` / ``DependencyCycleError`` -- the compiled
      catalog is structurally invalid.

Audit relevance:
    Every successful ``get_active_catalog()`` call emits a
    ``CATALOG_TRACE`` log entry carrying the catalog id, version and
    revision.  The revision is stored with every tenant active set.
"""

from __future__ import annotations

import logging
from pathlib import Path

from activation_config.assembler import assemble_from_directory
from activation_config.compiler import compile_catalog
from activation_config.lifecycle import CatalogStatus
from activation_config.schema import CatalogSource
from activation_config.validator import validate_catalog_source
from activation_kernel.domain.catalog import ModuleCatalog
from activation_kernel.exceptions import CatalogAssemblyError

_logger = logging.getLogger("activation_kernel.config")

# Default catalog sets directory
_DEFAULT_CATALOG_DIR = Path(__file__).parent / "sets"


def get_active_catalog(
    catalog_dir: Path | None = None,
    catalog_id: str | None = None,
) -> ModuleCatalog:
    """The ONLY public catalog entrypoint.

    Guarantees:
        - The returned ``ModuleCatalog`` has passed source validation and
          the kernel's integrity checks.
        - A ``CATALOG_TRACE`` log entry is emitted on every successful call.

    Non-goals:
        - No caching across calls; the caller builds the catalog once at
          startup and shares it.

    Args:
        catalog_dir: Override path to the catalog sets directory.
            Defaults to activation_config/sets/.
        catalog_id: Select a set by ``catalog_id`` instead of the default
            published-then-highest-version rule.

    Raises:
        FileNotFoundError: If no matching catalog set is found.
        CatalogAssemblyError: If source validation fails.
    """
    sets_dir = catalog_dir or _DEFAULT_CATALOG_DIR

    source = _find_matching_catalog(sets_dir, catalog_id)

    validation = validate_catalog_source(source)
    for warning in validation.warnings:
        _logger.warning(
            "catalog_validation_warning",
            extra={"catalog_id": source.catalog_id, "warning": warning},
        )
    if not validation.is_valid:
        raise CatalogAssemblyError(
            f"Catalog '{source.catalog_id}' failed validation", validation.errors
        )

    catalog = compile_catalog(source)

    # INVARIANT: compiled revision must match assembled source checksum.
    assert catalog.revision == source.checksum, (
        f"Revision drift: compiled={catalog.revision!r} != source={source.checksum!r}"
    )

    _logger.info(
        "CATALOG_TRACE",
        extra={
            "trace_type": "CATALOG_TRACE",
            "catalog_id": catalog.catalog_id,
            "catalog_version": catalog.version,
            "catalog_revision": catalog.revision,
            "catalog_status": source.identity.status.value,
            "module_count": len(catalog.modules),
            "bundle_count": len(catalog.bundles),
            "plan_count": len(catalog.plans),
        },
    )
    return catalog


def _find_matching_catalog(sets_dir: Path, catalog_id: str | None) -> CatalogSource:
    """Find the catalog set to load.

    Scans all subdirectories of *sets_dir* holding a ``root.yaml``.  With
    *catalog_id* the matching set wins (highest version if several).
    Otherwise PUBLISHED sets are preferred, then the highest version.
    Falls back to the single available set when nothing is published.

    Raises:
        FileNotFoundError: If ``sets_dir`` does not exist or no catalog
            set matches.
    """
    if not sets_dir.is_dir():
        raise FileNotFoundError(f"Catalog sets directory not found: {sets_dir}")

    available: list[CatalogSource] = []
    for subdir in sorted(sets_dir.iterdir()):
        if not subdir.is_dir():
            continue
        if not (subdir / "root.yaml").exists():
            continue
        available.append(assemble_from_directory(subdir))

    if catalog_id is not None:
        matching = [s for s in available if s.catalog_id == catalog_id]
        if not matching:
            raise FileNotFoundError(
                f"No catalog set found for catalog_id='{catalog_id}' in {sets_dir}"
            )
        return max(matching, key=lambda s: s.identity.version)

    published = [s for s in available if s.identity.status == CatalogStatus.PUBLISHED]
    if published:
        return max(published, key=lambda s: s.identity.version)

    # Fallback: if only one catalog set exists, use it (dev/test mode)
    if len(available) == 1:
        return available[0]

    raise FileNotFoundError(f"No published catalog set found in {sets_dir}")
