"""
ActivationController -- the resolver's caller-facing contract.

Responsibility:
    Orchestrates the closure engine, cascade planner and validator for the
    user-facing operations (enable, disable with confirmation, apply
    bundle, plan baseline) and produces the candidate active set plus a
    human-readable change summary.  The caller hands the candidate to its
    persistence layer.

Architecture position:
    Kernel > Services -- orchestration over the pure domain layer.  Unlike
    the other kernel services it owns no session: the controller is
    stateless with respect to tenants and performs no I/O.

Operation flow (per change request):
    Proposed -> Validated -> {Accepted | RequiresConfirmation | Rejected}
      - Rejected: only for unknown identifiers (raised as
        UnknownReferenceError subclasses).
      - RequiresConfirmation: disable() whose cascade reaches other
        modules; nothing is removed until confirm_disable().
      - Accepted: the candidate passed the mandatory final validate().

Invariants enforced:
    DEPENDENCY_CLOSED -- every returned candidate has passed validate().
    CONFIRMED_CASCADE -- disable() never removes more than its target.

Failure modes:
    - UnknownModuleError / UnknownBundleError / UnknownPlanError.
    - InconsistentResultError -- post-hoc validation of a result failed.
      Logged at ERROR with the offending errors before it is raised.
    - InvalidConfigurationError -- disable was handed an active set that
      was already inconsistent.

Concurrency:
    Every call takes a snapshot and returns a new frozenset.  The catalog is
    immutable.  Per-tenant read-modify-write serialization belongs to the
    caller (see activation_services).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import NoReturn

from activation_kernel.domain.cascade import CascadeDecision, plan_disable
from activation_kernel.domain.catalog import Bundle, ModuleCatalog, ModuleDefinition, Plan
from activation_kernel.domain.changes import (
    ActiveSetDiff,
    ChangeSummary,
    bundle_summary,
    confirmation_prompt,
    diff_active_sets,
    disable_summary,
    enable_many_summary,
    enable_summary,
    plan_summary,
)
from activation_kernel.domain.closure import expand_selection
from activation_kernel.domain.validator import ValidationResult, validate
from activation_kernel.exceptions import (
    InconsistentResultError,
    InvalidConfigurationError,
)
from activation_kernel.logging_config import get_logger

logger = get_logger("services.activation_controller")


class ChangeStatus(str, Enum):
    """Outcome of a change request that was not rejected."""

    ACCEPTED = "accepted"
    REQUIRES_CONFIRMATION = "requires_confirmation"


@dataclass(frozen=True)
class EnableResult:
    """Result of enabling one or more modules."""

    status: ChangeStatus
    new_active_set: frozenset[str]
    auto_added: tuple[str, ...]
    summary: ChangeSummary
    requested: tuple[str, ...] = ()


@dataclass(frozen=True)
class DisableResult:
    """
    Result of disable() / confirm_disable().

    When ``status`` is REQUIRES_CONFIRMATION, ``new_active_set`` equals the
    input set and ``decision`` carries the blast radius to show the caller.
    """

    status: ChangeStatus
    module_id: str
    new_active_set: frozenset[str]
    decision: CascadeDecision
    removed: tuple[str, ...]
    summary: ChangeSummary

    @property
    def requires_confirmation(self) -> bool:
        return self.status == ChangeStatus.REQUIRES_CONFIRMATION


@dataclass(frozen=True)
class BundleResult:
    """Result of applying a bundle (full replace)."""

    status: ChangeStatus
    bundle_id: str
    new_active_set: frozenset[str]
    added: tuple[str, ...]
    removed: tuple[str, ...]
    summary: ChangeSummary


class ActivationController:
    """
    Stateless facade over one immutable ``ModuleCatalog``.

    Contract:
        Every mutating-style operation accepts a snapshot of the tenant's
        active set (any iterable of module ids) and returns a new frozenset
        that has passed ``validate``.  Input sets are never mutated.

    Guarantees:
        - Deterministic and idempotent for identical inputs; callers may
          retry freely after transport or persistence failures.
        - Ordered report fields (``auto_added``, ``removed``, ``added``,
          cascade sets) use first-discovered order.

    Non-goals:
        - Does NOT persist anything or hold tenant identity.
        - Does NOT decide plan entitlement.
    """

    def __init__(self, catalog: ModuleCatalog):
        self._catalog = catalog

    @property
    def catalog(self) -> ModuleCatalog:
        return self._catalog

    # ------------------------------------------------------------------
    # Read-only
    # ------------------------------------------------------------------

    def get_catalog(self) -> list[ModuleDefinition]:
        return self._catalog.list_modules()

    def get_bundles(self, *, recommended_only: bool = False) -> list[Bundle]:
        bundles = self._catalog.list_bundles()
        if recommended_only:
            return [b for b in bundles if b.recommended]
        return bundles

    def get_plans(self) -> list[Plan]:
        return self._catalog.list_plans()

    def validate(
        self, candidate: Iterable[str], *, require_non_empty: bool = False
    ) -> ValidationResult:
        """Exposed directly so the persistence layer can re-check any candidate."""
        return validate(self._catalog, candidate, require_non_empty=require_non_empty)

    def diff(self, before: Iterable[str], after: Iterable[str]) -> ActiveSetDiff:
        return diff_active_sets(self._catalog, before, after)

    # ------------------------------------------------------------------
    # Enable
    # ------------------------------------------------------------------

    def enable(self, module_id: str, active_set: Iterable[str]) -> EnableResult:
        """
        Enable ``module_id`` together with its dependency closure.

        Missing dependencies are auto-added, never reported as errors.
        ``auto_added`` is everything newly enabled except ``module_id``.

        Raises:
            UnknownModuleError: unknown ``module_id`` or active-set member.
            InconsistentResultError: the result failed validation (defect).
        """
        self._catalog.require_module(module_id)
        before = self._catalog.normalize(active_set)
        before_set = set(before)

        expanded = expand_selection(self._catalog, (*before, module_id))
        auto_added = tuple(m for m in expanded if m not in before_set and m != module_id)
        new_active_set = frozenset(expanded)

        self._ensure_consistent("enable", new_active_set)

        summary = enable_summary(
            self._catalog,
            module_id,
            auto_added,
            already_enabled=module_id in before_set,
        )
        logger.info(
            "module_enabled",
            extra={
                "module_id": module_id,
                "auto_added": list(auto_added),
                "already_enabled": module_id in before_set,
                "catalog_revision": self._catalog.revision,
            },
        )
        return EnableResult(
            status=ChangeStatus.ACCEPTED,
            new_active_set=new_active_set,
            auto_added=auto_added,
            summary=summary,
            requested=(module_id,),
        )

    def enable_many(
        self, module_ids: Iterable[str], active_set: Iterable[str]
    ) -> EnableResult:
        """Enable several modules at once; same guarantees as ``enable``."""
        requested = tuple(dict.fromkeys(module_ids))
        for module_id in requested:
            self._catalog.require_module(module_id)
        before = self._catalog.normalize(active_set)
        before_set = set(before)

        expanded = expand_selection(self._catalog, (*before, *requested))
        newly_enabled = tuple(m for m in expanded if m not in before_set)
        auto_added = tuple(m for m in newly_enabled if m not in requested)
        new_active_set = frozenset(expanded)

        self._ensure_consistent("enable_many", new_active_set)

        logger.info(
            "modules_enabled",
            extra={
                "requested": list(requested),
                "auto_added": list(auto_added),
                "catalog_revision": self._catalog.revision,
            },
        )
        return EnableResult(
            status=ChangeStatus.ACCEPTED,
            new_active_set=new_active_set,
            auto_added=auto_added,
            summary=enable_many_summary(self._catalog, requested, auto_added, newly_enabled),
            requested=requested,
        )

    def plan_baseline(self, plan_id: str) -> EnableResult:
        """
        Active set a new tenant on ``plan_id`` starts from.

        Plans need not be closed under ``requires``; the baseline is the
        expansion of the plan's included modules.

        Raises:
            UnknownPlanError: if ``plan_id`` is not in the catalog.
        """
        plan = self._catalog.require_plan(plan_id)
        expanded = expand_selection(self._catalog, plan.included_modules)
        included = set(plan.included_modules)
        auto_added = tuple(m for m in expanded if m not in included)
        new_active_set = frozenset(expanded)

        self._ensure_consistent("plan_baseline", new_active_set)

        logger.info(
            "plan_baseline_computed",
            extra={
                "plan_id": plan_id,
                "auto_added": list(auto_added),
                "catalog_revision": self._catalog.revision,
            },
        )
        return EnableResult(
            status=ChangeStatus.ACCEPTED,
            new_active_set=new_active_set,
            auto_added=auto_added,
            summary=plan_summary(self._catalog, plan, auto_added),
            requested=plan.included_modules,
        )

    # ------------------------------------------------------------------
    # Disable (two-step)
    # ------------------------------------------------------------------

    def plan_disable(self, module_id: str, active_set: Iterable[str]) -> CascadeDecision:
        """First step: what would disabling ``module_id`` take with it."""
        decision = plan_disable(self._catalog, module_id, active_set)
        logger.info(
            "module_disable_planned",
            extra={
                "module_id": module_id,
                "can_disable_alone": decision.can_disable_alone,
                "blocking_modules": list(decision.blocking_modules),
                "full_cascade_set": list(decision.full_cascade_set),
            },
        )
        return decision

    def disable(self, module_id: str, active_set: Iterable[str]) -> DisableResult:
        """
        Disable ``module_id`` if it can go alone.

        Otherwise returns REQUIRES_CONFIRMATION with the cascade decision and
        the input set unchanged; the caller must call ``confirm_disable``.

        Raises:
            InvalidConfigurationError: ``active_set`` is itself not
                dependency-closed.
        """
        before = self._catalog.normalize(active_set)
        self._require_consistent_input(before)
        decision = self.plan_disable(module_id, before)

        if not decision.can_disable_alone:
            logger.info(
                "module_disable_requires_confirmation",
                extra={
                    "module_id": module_id,
                    "blocking_modules": list(decision.blocking_modules),
                },
            )
            return DisableResult(
                status=ChangeStatus.REQUIRES_CONFIRMATION,
                module_id=module_id,
                new_active_set=frozenset(before),
                decision=decision,
                removed=(),
                summary=confirmation_prompt(self._catalog, decision),
            )

        return self._apply_disable(module_id, before, decision)

    def confirm_disable(self, module_id: str, active_set: Iterable[str]) -> DisableResult:
        """
        Second step: remove the full cascade computed by ``plan_disable``.

        The cascade is recomputed from ``active_set`` rather than trusted
        from an earlier call, so a stale plan cannot leave dangling
        dependents.
        """
        before = self._catalog.normalize(active_set)
        self._require_consistent_input(before)
        decision = plan_disable(self._catalog, module_id, before)
        return self._apply_disable(module_id, before, decision)

    def _apply_disable(
        self,
        module_id: str,
        before: tuple[str, ...],
        decision: CascadeDecision,
    ) -> DisableResult:
        removed = decision.full_cascade_set
        removed_set = set(removed)
        new_active_set = frozenset(m for m in before if m not in removed_set)

        self._ensure_consistent("disable", new_active_set)

        logger.info(
            "module_disabled",
            extra={
                "module_id": module_id,
                "removed": list(removed),
                "cascaded": len(removed) > 1,
            },
        )
        return DisableResult(
            status=ChangeStatus.ACCEPTED,
            module_id=module_id,
            new_active_set=new_active_set,
            decision=decision,
            removed=removed,
            summary=disable_summary(self._catalog, module_id, removed),
        )

    # ------------------------------------------------------------------
    # Bundles
    # ------------------------------------------------------------------

    def apply_bundle(self, bundle_id: str, active_set: Iterable[str]) -> BundleResult:
        """
        Replace the active set with the bundle's module set verbatim.

        Raises:
            UnknownBundleError: if ``bundle_id`` is not in the catalog.
            InconsistentResultError: the bundle failed validation (defect:
                bundles are validated at catalog build time).
        """
        bundle = self._catalog.require_bundle(bundle_id)
        before = self._catalog.normalize(active_set)
        new_active_set = bundle.module_set

        self._ensure_consistent("apply_bundle", new_active_set)

        diff = diff_active_sets(self._catalog, before, new_active_set)
        logger.info(
            "bundle_applied",
            extra={
                "bundle_id": bundle_id,
                "added": list(diff.added),
                "removed": list(diff.removed),
                "catalog_revision": self._catalog.revision,
            },
        )
        return BundleResult(
            status=ChangeStatus.ACCEPTED,
            bundle_id=bundle_id,
            new_active_set=new_active_set,
            added=diff.added,
            removed=diff.removed,
            summary=bundle_summary(self._catalog, bundle, diff),
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require_consistent_input(self, before: tuple[str, ...]) -> None:
        prior = validate(self._catalog, before)
        if not prior.valid:
            raise InvalidConfigurationError(list(prior.errors))

    def _ensure_consistent(self, operation: str, candidate: frozenset[str]) -> None:
        result = validate(self._catalog, candidate)
        if not result.valid:
            self._fail_inconsistent(operation, result)

    def _fail_inconsistent(self, operation: str, result: ValidationResult) -> NoReturn:
        error = InconsistentResultError(operation, list(result.errors))
        logger.error(
            "inconsistent_result",
            exc_info=(InconsistentResultError, error, None),
            extra={
                "operation": operation,
                "catalog_id": self._catalog.catalog_id,
                "catalog_revision": self._catalog.revision,
            },
        )
        raise error
