"""
Dependency Closure Engine (``activation_kernel.domain.closure``).

Responsibility
--------------
Answers "what must be enabled for this module to work": the transitive set
of modules reachable along ``requires`` edges, the module itself included.

Architecture position
---------------------
**Kernel domain layer** -- pure functions over an immutable
``ModuleCatalog``.  ZERO I/O, no side effects.

Invariants enforced
-------------------
* Closure completeness: every direct or transitive dependency is present;
  nothing unreachable is.
* Output order is first-discovered breadth-first order, module first, so
  "also enabled: X, Y" messaging is stable.
"""

from __future__ import annotations

from collections.abc import Iterable

from activation_kernel.domain.catalog import ModuleCatalog


def closure(catalog: ModuleCatalog, module_id: str) -> tuple[str, ...]:
    """
    Return ``module_id`` followed by all of its transitive dependencies.

    Raises:
        UnknownModuleError: if ``module_id`` is not in the catalog.
    """
    return catalog.closure_of(module_id)


def expand_selection(
    catalog: ModuleCatalog, module_ids: Iterable[str]
) -> tuple[str, ...]:
    """
    Union of the closures of several modules.

    Order: each selected module's closure in turn, skipping anything
    already collected.

    Raises:
        UnknownModuleError: for the first unknown id in ``module_ids``.
    """
    result: dict[str, None] = {}
    for module_id in module_ids:
        for member in catalog.closure_of(module_id):
            result.setdefault(member, None)
    return tuple(result)


def dependents(catalog: ModuleCatalog, module_id: str) -> tuple[str, ...]:
    """Modules that directly require ``module_id``."""
    return catalog.require_module(module_id).required_by


def dependency_chain(catalog: ModuleCatalog, module_id: str) -> str:
    """
    Display string of the direct dependencies, e.g. ``"Billing -> Rooms"``.

    Empty for a module with no dependencies.
    """
    module = catalog.require_module(module_id)
    return " -> ".join(catalog.short_name(dep) for dep in module.requires)
