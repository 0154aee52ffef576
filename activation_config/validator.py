"""
Catalog Source Validator (``activation_config.validator``).

Responsibility
--------------
Validates a ``CatalogSource`` as authored, before it is compiled.  These
are the authoring mistakes the kernel's structural integrity checks do not
look for (empty names, duplicated list entries, plan overlap).  Graph
integrity (unknown references, cycles, bundle consistency) is proven by
``ModuleCatalog.build`` during compilation.

Failure modes
-------------
* Validation errors (``CatalogValidationResult.errors``) -> the catalog
  MUST NOT be compiled.
* Validation warnings -> the catalog may be compiled but should be
  reviewed.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from activation_config.schema import CatalogSource


@dataclass
class CatalogValidationResult:
    """
    Result of catalog source validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block compilation but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_catalog_source(source: CatalogSource) -> CatalogValidationResult:
    """
    Validate an assembled catalog source.

    Postconditions:
        - Returns a ``CatalogValidationResult`` with errors and warnings.
        - A source with errors MUST NOT be compiled.
    """
    result = CatalogValidationResult()

    _validate_unique_ids(
        "module", (m.id for m in source.modules), result
    )
    _validate_unique_ids(
        "bundle", (b.id for b in source.bundles), result
    )
    _validate_unique_ids(
        "plan", (p.id for p in source.plans), result
    )
    _validate_modules(source, result)
    _validate_bundles(source, result)
    _validate_plans(source, result)

    return result


def _duplicates(items: Iterable[str]) -> list[str]:
    return [item for item, count in Counter(items).items() if count > 1]


def _validate_unique_ids(
    kind: str, ids: Iterable[str], result: CatalogValidationResult
) -> None:
    for dup in _duplicates(ids):
        result.add_error(f"Duplicate {kind} id '{dup}'")


def _validate_modules(source: CatalogSource, result: CatalogValidationResult) -> None:
    if not source.modules:
        result.add_error("Catalog declares no modules")
    for module in source.modules:
        if not module.id.strip():
            result.add_error("Module with empty id")
        if not module.name.strip():
            result.add_error(f"Module '{module.id}' has an empty name")
        for dup in _duplicates(module.requires):
            result.add_warning(f"Module '{module.id}' lists '{dup}' more than once in requires")
        if module.is_base and module.requires:
            result.add_warning(
                f"Module '{module.id}' is marked is_base but requires "
                + ", ".join(module.requires)
            )


def _validate_bundles(source: CatalogSource, result: CatalogValidationResult) -> None:
    for bundle in source.bundles:
        if not bundle.name.strip():
            result.add_error(f"Bundle '{bundle.id}' has an empty name")
        if not bundle.modules:
            result.add_error(f"Bundle '{bundle.id}' has no modules")
        for dup in _duplicates(bundle.modules):
            result.add_warning(f"Bundle '{bundle.id}' lists '{dup}' more than once")


def _validate_plans(source: CatalogSource, result: CatalogValidationResult) -> None:
    for plan in source.plans:
        if not plan.name.strip():
            result.add_error(f"Plan '{plan.id}' has an empty name")
        overlap = set(plan.included_modules) & set(plan.optional_modules)
        for module_id in sorted(overlap):
            result.add_warning(
                f"Plan '{plan.id}' lists '{module_id}' as both included and optional"
            )
