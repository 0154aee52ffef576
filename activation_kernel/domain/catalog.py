"""
ModuleCatalog -- the immutable description of every known module.

Responsibility:
    Holds the module definitions (Module Catalog), the named presets
    (Bundle Catalog) and the plan module lists for one catalog revision,
    and proves them internally consistent before anything may use them.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Built once at
    startup (by ``activation_config`` from YAML, or directly by tests) and
    shared read-only by every request for the process lifetime.

Invariants enforced:
    KNOWN_IDENTIFIERS -- requires edges, bundle members and plan members
        all name modules in the catalog.
    ACYCLIC_CATALOG -- no self-references, no dependency cycles.
    BUNDLE_SELF_CONSISTENT -- every bundle passes the validator.

Failure modes:
    - ``CatalogIntegrityError`` from ``ModuleCatalog.build`` listing every
      problem found.
    - ``DependencyCycleError`` when the requires-graph is cyclic.
    - ``UnknownModuleError`` / ``UnknownBundleError`` / ``UnknownPlanError``
      from the ``require_*`` lookups.

Concurrency:
    Every field is a frozen dataclass, tuple, or read-only mapping, and
    closures are precomputed during ``build``.  Unsynchronized concurrent
    reads are safe.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from activation_kernel.domain.graph import (
    find_cycle,
    missing_dependencies,
    reverse_edges,
    walk_requires,
)
from activation_kernel.exceptions import (
    CatalogIntegrityError,
    DependencyCycleError,
    UnknownBundleError,
    UnknownModuleError,
    UnknownPlanError,
)
from activation_kernel.logging_config import get_logger

logger = get_logger("domain.catalog")


@dataclass(frozen=True)
class ModuleDefinition:
    """
    One optional feature module.

    Contract:
        ``requires`` lists direct dependencies only, in declaration order.
        ``required_by`` is derived by ``ModuleCatalog.build`` and is never
        authored by hand.
    """

    id: str
    name: str
    short_name: str
    description: str = ""
    is_base: bool = False
    requires: tuple[str, ...] = ()
    required_by: tuple[str, ...] = ()


@dataclass(frozen=True)
class Bundle:
    """A named preset module set.  Applying it replaces the active set."""

    id: str
    name: str
    modules: tuple[str, ...]
    description: str = ""
    use_case: str = ""
    recommended: bool = False

    @property
    def module_set(self) -> frozenset[str]:
        return frozenset(self.modules)


@dataclass(frozen=True)
class Plan:
    """
    Module lists a subscription plan supplies.

    Entitlement decisions live outside the kernel; a plan only answers
    "which modules does a new tenant on this plan start with".
    """

    id: str
    name: str
    included_modules: tuple[str, ...] = ()
    optional_modules: tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class ModuleCatalog:
    """
    Validated, immutable module/bundle/plan catalog.

    Contract:
        Obtain instances through ``ModuleCatalog.build``; it is the only
        path that runs the integrity checks.

    Guarantees:
        - ``module_ids`` preserves declaration order; every ordered output
          of the kernel that is not traversal-ordered uses it.
        - ``closure_of`` is O(1): closures are computed once, in build.

    Non-goals:
        - No versioning of individual modules: a module is present or
          absent for a given catalog revision.
    """

    catalog_id: str
    version: int
    revision: str
    modules: Mapping[str, ModuleDefinition]
    bundles: Mapping[str, Bundle]
    plans: Mapping[str, Plan]
    _closures: Mapping[str, tuple[str, ...]] = field(repr=False, compare=False)

    @classmethod
    def build(
        cls,
        modules: Iterable[ModuleDefinition],
        bundles: Iterable[Bundle] = (),
        plans: Iterable[Plan] = (),
        *,
        catalog_id: str = "default",
        version: int = 1,
        revision: str = "",
    ) -> ModuleCatalog:
        """
        Prove a catalog consistent and freeze it.

        Preconditions:
            - None; every defect is reported rather than assumed away.

        Postconditions:
            - The returned catalog is acyclic, every reference resolves, and
              every bundle is self-consistent.

        Raises:
            CatalogIntegrityError: duplicate ids, unknown references,
                self-references, or inconsistent bundles (all listed).
            DependencyCycleError: the requires-graph has a cycle.
        """
        module_list = list(modules)
        bundle_list = list(bundles)
        plan_list = list(plans)
        problems: list[str] = []

        definitions: dict[str, ModuleDefinition] = {}
        for module in module_list:
            if module.id in definitions:
                problems.append(f"Duplicate module id '{module.id}'")
                continue
            definitions[module.id] = module

        for module in definitions.values():
            for dep in module.requires:
                if dep == module.id:
                    problems.append(f"Module '{module.id}' requires itself")
                elif dep not in definitions:
                    problems.append(
                        f"Module '{module.id}' requires unknown module '{dep}'"
                    )

        if problems:
            raise CatalogIntegrityError(catalog_id, problems)

        requires = {mid: m.requires for mid, m in definitions.items()}
        cycle = find_cycle(requires)
        if cycle is not None:
            raise DependencyCycleError(catalog_id, list(cycle))

        dependents = reverse_edges(requires)
        definitions = {
            mid: replace(m, required_by=dependents[mid])
            for mid, m in definitions.items()
        }
        closures = {mid: walk_requires(requires, mid) for mid in definitions}

        bundle_map: dict[str, Bundle] = {}
        for bundle in bundle_list:
            if bundle.id in bundle_map:
                problems.append(f"Duplicate bundle id '{bundle.id}'")
                continue
            bundle_map[bundle.id] = bundle
            unknown = [m for m in bundle.modules if m not in definitions]
            if unknown:
                problems.append(
                    f"Bundle '{bundle.id}' references unknown module(s): "
                    + ", ".join(unknown)
                )
                continue
            for member, dep in missing_dependencies(requires, bundle.modules):
                problems.append(
                    f"Bundle '{bundle.id}' is not self-consistent: "
                    f"{definitions[member].short_name} requires "
                    f"{definitions[dep].short_name}"
                )

        plan_map: dict[str, Plan] = {}
        for plan in plan_list:
            if plan.id in plan_map:
                problems.append(f"Duplicate plan id '{plan.id}'")
                continue
            plan_map[plan.id] = plan
            unknown = [
                m
                for m in (*plan.included_modules, *plan.optional_modules)
                if m not in definitions
            ]
            if unknown:
                problems.append(
                    f"Plan '{plan.id}' references unknown module(s): "
                    + ", ".join(unknown)
                )

        if problems:
            raise CatalogIntegrityError(catalog_id, problems)

        catalog = cls(
            catalog_id=catalog_id,
            version=version,
            revision=revision,
            modules=MappingProxyType(definitions),
            bundles=MappingProxyType(bundle_map),
            plans=MappingProxyType(plan_map),
            _closures=MappingProxyType(closures),
        )
        logger.info(
            "catalog_built",
            extra={
                "catalog_id": catalog_id,
                "catalog_version": version,
                "catalog_revision": revision,
                "module_count": len(definitions),
                "bundle_count": len(bundle_map),
                "plan_count": len(plan_map),
            },
        )
        return catalog

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def module_ids(self) -> tuple[str, ...]:
        return tuple(self.modules)

    @property
    def requires_graph(self) -> Mapping[str, tuple[str, ...]]:
        return MappingProxyType({mid: m.requires for mid, m in self.modules.items()})

    def require_module(self, module_id: str) -> ModuleDefinition:
        try:
            return self.modules[module_id]
        except KeyError:
            raise UnknownModuleError(module_id) from None

    def require_bundle(self, bundle_id: str) -> Bundle:
        try:
            return self.bundles[bundle_id]
        except KeyError:
            raise UnknownBundleError(bundle_id) from None

    def require_plan(self, plan_id: str) -> Plan:
        try:
            return self.plans[plan_id]
        except KeyError:
            raise UnknownPlanError(plan_id) from None

    def closure_of(self, module_id: str) -> tuple[str, ...]:
        """Precomputed closure of ``module_id``, first-discovered order."""
        self.require_module(module_id)
        return self._closures[module_id]

    def short_name(self, module_id: str) -> str:
        return self.require_module(module_id).short_name

    def normalize(self, module_ids: Iterable[str]) -> tuple[str, ...]:
        """
        Return the distinct ids in catalog declaration order.

        Raises:
            UnknownModuleError: for the first id not in the catalog.
        """
        wanted = set(module_ids)
        for module_id in sorted(wanted):
            self.require_module(module_id)
        return tuple(mid for mid in self.modules if mid in wanted)

    def list_modules(self) -> list[ModuleDefinition]:
        return list(self.modules.values())

    def list_bundles(self) -> list[Bundle]:
        return list(self.bundles.values())

    def list_plans(self) -> list[Plan]:
        return list(self.plans.values())
