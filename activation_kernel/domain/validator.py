"""
Activation Validator (``activation_kernel.domain.validator``).

Responsibility
--------------
The single source of truth for "is this module set consistent": every
active module's dependencies must also be active.  Every controller
operation ends by calling ``validate`` on its proposed result, even where
the operation already maintains the invariant by construction.

Architecture position
---------------------
**Kernel domain layer** -- pure function over an immutable
``ModuleCatalog``.  ZERO I/O.

Invariants enforced
-------------------
* Soundness: ``valid`` is True iff ``requires(m)`` is a subset of the set
  for every member ``m``.
* One error string per violated (module, dependency) pair.

Failure modes
-------------
* ``UnknownModuleError`` -- the candidate names a module the catalog does
  not know.  A stale persisted set is a caller bug, not a violation.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from activation_kernel.domain.catalog import ModuleCatalog
from activation_kernel.domain.graph import missing_dependencies

EMPTY_SET_ERROR = "At least one module must be enabled"


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating a candidate active set.

    Contract:
        ``valid`` is True only when ``errors`` is empty.
    """

    valid: bool
    errors: tuple[str, ...] = ()

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def from_errors(cls, errors: Iterable[str]) -> ValidationResult:
        errors = tuple(errors)
        return cls(valid=not errors, errors=errors)


def validate(
    catalog: ModuleCatalog,
    active_set: Iterable[str],
    *,
    require_non_empty: bool = False,
) -> ValidationResult:
    """
    Check that every active module's dependencies are active.

    Args:
        catalog: The loaded catalog.
        active_set: Candidate module ids, any iterable.
        require_non_empty: Also reject an empty set.  Used as the persist
            gate; the dependency invariant alone accepts the empty set.

    Returns:
        ValidationResult with one "<Module> requires <Dependency>" message per
        missing dependency, in catalog declaration order.

    Raises:
        UnknownModuleError: if ``active_set`` contains an unknown id.
    """
    members = catalog.normalize(active_set)
    if require_non_empty and not members:
        return ValidationResult.from_errors([EMPTY_SET_ERROR])

    errors = [
        f"{catalog.short_name(module_id)} requires {catalog.short_name(dep)}"
        for module_id, dep in missing_dependencies(catalog.requires_graph, members)
    ]
    if not errors:
        return ValidationResult.ok()
    return ValidationResult.from_errors(errors)
