"""
Catalog Compiler -- CatalogSource -> ModuleCatalog.

Translates the authored source into kernel types and hands them to
``ModuleCatalog.build``, which proves the catalog acyclic, reference-closed
and bundle-consistent.  The source checksum becomes the catalog revision.
"""

from __future__ import annotations

from activation_config.schema import BundleSpec, CatalogSource, ModuleSpec, PlanSpec
from activation_kernel.domain.catalog import Bundle, ModuleCatalog, ModuleDefinition, Plan


def compile_catalog(source: CatalogSource) -> ModuleCatalog:
    """Compile a validated source into the runtime catalog.

    Raises:
        CatalogIntegrityError: unknown references, duplicates or
            inconsistent bundles.
        DependencyCycleError: the requires-graph is cyclic.
    """
    return ModuleCatalog.build(
        [_compile_module(m) for m in source.modules],
        [_compile_bundle(b) for b in source.bundles],
        [_compile_plan(p) for p in source.plans],
        catalog_id=source.identity.catalog_id,
        version=source.identity.version,
        revision=source.checksum,
    )


def _compile_module(spec: ModuleSpec) -> ModuleDefinition:
    return ModuleDefinition(
        id=spec.id,
        name=spec.name,
        short_name=spec.short_name,
        description=spec.description,
        is_base=spec.is_base,
        requires=spec.requires,
    )


def _compile_bundle(spec: BundleSpec) -> Bundle:
    return Bundle(
        id=spec.id,
        name=spec.name,
        modules=spec.modules,
        description=spec.description,
        use_case=spec.use_case,
        recommended=spec.recommended,
    )


def _compile_plan(spec: PlanSpec) -> Plan:
    return Plan(
        id=spec.id,
        name=spec.name,
        included_modules=spec.included_modules,
        optional_modules=spec.optional_modules,
        description=spec.description,
    )
