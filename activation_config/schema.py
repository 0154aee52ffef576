"""
CatalogSource schema.

Defines the human-authored, reviewable source artifact for the module
catalog. YAML fragments are parsed into these types by the loader, composed
by the assembler, and compiled into a ``ModuleCatalog`` by the compiler.

Key distinction:
  CatalogSource  = source artifact (human-authored, versioned)
  ModuleCatalog  = runtime artifact (integrity-proven, frozen)
"""

from __future__ import annotations

from dataclasses import dataclass

from activation_config.lifecycle import CatalogStatus


@dataclass(frozen=True)
class CatalogIdentity:
    """Identity of a catalog set, from ``root.yaml``."""

    catalog_id: str
    name: str
    version: int
    status: CatalogStatus = CatalogStatus.DRAFT
    description: str = ""


@dataclass(frozen=True)
class ModuleSpec:
    """One module as authored in ``modules.yaml``."""

    id: str
    name: str
    short_name: str
    description: str = ""
    is_base: bool = False
    requires: tuple[str, ...] = ()


@dataclass(frozen=True)
class BundleSpec:
    """One preset as authored in ``bundles.yaml``."""

    id: str
    name: str
    modules: tuple[str, ...]
    description: str = ""
    use_case: str = ""
    recommended: bool = False


@dataclass(frozen=True)
class PlanSpec:
    """Plan module lists as authored in ``plans.yaml``."""

    id: str
    name: str
    included_modules: tuple[str, ...] = ()
    optional_modules: tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class CatalogSource:
    """The assembled catalog set.  ``checksum`` is the catalog revision."""

    identity: CatalogIdentity
    modules: tuple[ModuleSpec, ...]
    bundles: tuple[BundleSpec, ...] = ()
    plans: tuple[PlanSpec, ...] = ()
    checksum: str = ""

    @property
    def catalog_id(self) -> str:
        return self.identity.catalog_id
