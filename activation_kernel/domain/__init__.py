"""
Pure domain layer.

Catalog types and the graph logic of the resolver, with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Configuration files
- I/O

All domain objects are immutable and deterministic.
"""

from activation_kernel.domain.cascade import CascadeDecision, plan_disable
from activation_kernel.domain.catalog import Bundle, ModuleCatalog, ModuleDefinition, Plan
from activation_kernel.domain.changes import ActiveSetDiff, ChangeSummary, diff_active_sets
from activation_kernel.domain.closure import (
    closure,
    dependency_chain,
    dependents,
    expand_selection,
)
from activation_kernel.domain.validator import ValidationResult, validate

__all__ = [
    "ActiveSetDiff",
    "Bundle",
    "CascadeDecision",
    "ChangeSummary",
    "ModuleCatalog",
    "ModuleDefinition",
    "Plan",
    "ValidationResult",
    "closure",
    "dependency_chain",
    "dependents",
    "diff_active_sets",
    "expand_selection",
    "plan_disable",
    "validate",
]
