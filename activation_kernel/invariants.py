"""
Activation Kernel Invariants Contract.

These invariants are structural law. No catalog, bundle, plan, or caller
option may switch them off.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across ModuleCatalog.build, the activation
validator, the cascade planner, and the ActivationController.
"""

from enum import Enum, unique


@unique
class ActivationInvariant(str, Enum):
    """Non-configurable invariants enforced by the activation kernel.

    Each value names one structural guarantee the resolver provides
    unconditionally.
    """

    KNOWN_IDENTIFIERS = "known_identifiers"
    """Every module id referenced as a dependency, in a bundle, in a plan, or
    in an active set exists in the catalog. Enforced by ModuleCatalog.build
    and by ModuleCatalog.require_module at every operation boundary."""

    ACYCLIC_CATALOG = "acyclic_catalog"
    """The requires-graph has no cycles and no self-references. Enforced
    by ModuleCatalog.build; a cyclic catalog never loads."""

    DEPENDENCY_CLOSED = "dependency_closed"
    """Every active module's dependencies are active. Enforced by the
    mandatory validate() call at the end of every controller operation."""

    BUNDLE_SELF_CONSISTENT = "bundle_self_consistent"
    """Every bundle's module set passes the validator. Enforced once, at
    catalog build time."""

    CONFIRMED_CASCADE = "confirmed_cascade"
    """A disable that would take other modules with it is never applied
    without an explicit confirm_disable call. Enforced by
    ActivationController.disable."""


# All invariants as a frozenset for programmatic checks.
ALL_ACTIVATION_INVARIANTS: frozenset[ActivationInvariant] = frozenset(ActivationInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "activation_config",
    "activation_services",
)
