"""
Active-set diffs and human-readable change summaries.

Pure helpers used by ``ActivationController`` to report what an operation
did ("Also enabled: Rooms (required by Reservations)").  Names come from
``ModuleDefinition.short_name``; ordering is catalog declaration order
unless the caller passes an already-ordered sequence.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from activation_kernel.domain.cascade import CascadeDecision
from activation_kernel.domain.catalog import Bundle, ModuleCatalog, Plan


@dataclass(frozen=True)
class ActiveSetDiff:
    """Modules added and removed between two active sets."""

    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed)


@dataclass(frozen=True)
class ChangeSummary:
    """Ordered, display-ready lines describing one change."""

    lines: tuple[str, ...] = ()

    def __str__(self) -> str:
        return "\n".join(self.lines)


def diff_active_sets(
    catalog: ModuleCatalog,
    before: Iterable[str],
    after: Iterable[str],
) -> ActiveSetDiff:
    """
    Compare two active sets.

    Raises:
        UnknownModuleError: if either set names an unknown module.
    """
    old = catalog.normalize(before)
    new = catalog.normalize(after)
    old_set, new_set = set(old), set(new)
    return ActiveSetDiff(
        added=tuple(m for m in new if m not in old_set),
        removed=tuple(m for m in old if m not in new_set),
    )


def _names(catalog: ModuleCatalog, module_ids: Sequence[str]) -> str:
    return ", ".join(catalog.short_name(m) for m in module_ids)


def enable_summary(
    catalog: ModuleCatalog,
    module_id: str,
    auto_added: Sequence[str],
    *,
    already_enabled: bool = False,
) -> ChangeSummary:
    name = catalog.short_name(module_id)
    if already_enabled and not auto_added:
        return ChangeSummary((f"{name} is already enabled",))
    lines = [f"Enabled {name}"]
    if auto_added:
        lines.append(f"Also enabled: {_names(catalog, auto_added)} (required by {name})")
    return ChangeSummary(tuple(lines))


def enable_many_summary(
    catalog: ModuleCatalog,
    requested: Sequence[str],
    auto_added: Sequence[str],
    newly_enabled: Sequence[str],
) -> ChangeSummary:
    if not newly_enabled:
        return ChangeSummary((f"{_names(catalog, requested)} already enabled",))
    lines = [f"Enabled {_names(catalog, [m for m in requested if m in newly_enabled])}"]
    if auto_added:
        lines.append(f"Also enabled: {_names(catalog, auto_added)}")
    return ChangeSummary(tuple(lines))


def confirmation_prompt(catalog: ModuleCatalog, decision: CascadeDecision) -> ChangeSummary:
    """Text shown to an administrator before a cascade is confirmed."""
    name = catalog.short_name(decision.target)
    blocking = decision.blocking_modules
    verb = "depend" if len(blocking) > 1 else "depends"
    return ChangeSummary(
        (
            f"Cannot disable {name}: {_names(catalog, blocking)} {verb} on this module",
            f"To disable {name}, you must first disable: {_names(catalog, blocking)}",
            f"Or disable all at once ({len(decision.full_cascade_set)} modules): "
            f"{_names(catalog, decision.full_cascade_set)}",
        )
    )


def disable_summary(
    catalog: ModuleCatalog, module_id: str, removed: Sequence[str]
) -> ChangeSummary:
    if not removed:
        return ChangeSummary((f"{catalog.short_name(module_id)} is already disabled",))
    return ChangeSummary((f"Disabled: {_names(catalog, removed)}",))


def bundle_summary(
    catalog: ModuleCatalog, bundle: Bundle, diff: ActiveSetDiff
) -> ChangeSummary:
    lines = [f'Applied "{bundle.name}" configuration']
    if diff.added:
        lines.append(f"Adding: {_names(catalog, diff.added)}")
    if diff.removed:
        lines.append(f"Removing: {_names(catalog, diff.removed)}")
    if not diff.has_changes:
        lines.append("No changes")
    return ChangeSummary(tuple(lines))


def plan_summary(
    catalog: ModuleCatalog, plan: Plan, auto_added: Sequence[str]
) -> ChangeSummary:
    lines = [f"{plan.name} plan includes {len(plan.included_modules)} modules"]
    if auto_added:
        lines.append(f"Also enabled: {_names(catalog, auto_added)} (required by plan modules)")
    return ChangeSummary(tuple(lines))
