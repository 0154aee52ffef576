"""
TenantModuleService -- read, resolve and write back a tenant's active set.

Responsibility:
    The persistence collaborator of the activation controller.  Each
    operation reads the tenant's TenantModuleSet, runs the controller on a
    snapshot of it, re-validates the candidate at the persist gate and
    writes the result back.

Architecture position:
    Services -- imperative shell over ``activation_kernel``.  The kernel
    does no I/O; everything tenant-scoped happens here.

Invariants enforced:
    DEPENDENCY_CLOSED -- nothing is written that fails
        ``validate(require_non_empty=True)``.
    CONFIRMED_CASCADE -- ``disable`` writes only when the target can go
        alone; cascades are written by ``confirm_disable``.
    Per-tenant serialization -- the row's version column makes a
        concurrent read-modify-write fail rather than overwrite.
    Flush-only -- never commits or rolls back the session.

Failure modes:
    - TenantNotFoundError: no record for the tenant.
    - TenantAlreadyProvisionedError: ``provision`` on an existing tenant.
    - StaleActiveSetError: ``expected_version`` does not match, or another
      writer committed between read and flush.
    - InvalidConfigurationError: the candidate failed the persist gate
      (in practice only the empty set).
    - UnknownReferenceError subclasses from the controller.

Audit relevance:
    Every write logs ``tenant_modules_saved`` with the before/after diff
    and the catalog revision.  Every log line emitted inside an operation,
    including the controller's, carries tenant_id, actor_id and
    catalog_revision through LogContext.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from activation_kernel.domain.cascade import CascadeDecision
from activation_kernel.exceptions import (
    InvalidConfigurationError,
    StaleActiveSetError,
    TenantAlreadyProvisionedError,
    TenantNotFoundError,
)
from activation_kernel.logging_config import LogContext, get_logger
from activation_kernel.services.activation_controller import (
    ActivationController,
    BundleResult,
    DisableResult,
    EnableResult,
)
from activation_services.models.tenant_module_set import TenantModuleSet

logger = get_logger("services.tenant_modules")


@dataclass(frozen=True)
class TenantModuleSetInfo:
    """Immutable snapshot of a tenant's stored active set."""

    tenant_id: str
    enabled_modules: frozenset[str]
    catalog_revision: str
    version: int


class TenantModuleService:
    """
    Applies controller operations to persisted tenant active sets.

    Contract:
        Accepts a SQLAlchemy ``Session`` owned by the caller and flushes
        within its transaction.  Every mutating method takes an optional
        ``expected_version``: the version the caller showed to the user.

    Guarantees:
        - Nothing is flushed when the candidate equals the stored set, so
          retries of an applied change do not bump the version.
        - Returned results are the controller's own result objects.

    Non-goals:
        - Does NOT call ``session.commit()`` -- see ``db.engine.session_scope``.
        - Does NOT decide which modules a tenant's plan entitles it to.
    """

    def __init__(
        self,
        session: Session,
        controller: ActivationController,
        actor_id: str | None = None,
    ):
        self.session = session
        self._controller = controller
        self._actor_id = actor_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_record(self, tenant_id: str) -> TenantModuleSetInfo:
        """Snapshot of the stored record.

        Raises:
            TenantNotFoundError: no record for ``tenant_id``.
        """
        return self._to_dto(self._load(tenant_id))

    def get_active_set(self, tenant_id: str) -> frozenset[str]:
        return self._load(tenant_id).module_set

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------

    def provision(
        self,
        tenant_id: str,
        plan_id: str | None = None,
        modules: Iterable[str] = (),
    ) -> TenantModuleSetInfo:
        """
        Create the tenant's record.

        The starting set is the plan baseline (when ``plan_id`` is given)
        plus the closure of ``modules``.

        Raises:
            TenantAlreadyProvisionedError: the tenant already has a record.
            UnknownPlanError / UnknownModuleError: unknown identifiers.
            InvalidConfigurationError: the starting set is empty.
        """
        with self._log_context(tenant_id):
            if self.session.get(TenantModuleSet, tenant_id) is not None:
                raise TenantAlreadyProvisionedError(tenant_id)

            starting: frozenset[str] = frozenset()
            if plan_id is not None:
                starting = self._controller.plan_baseline(plan_id).new_active_set
            requested = tuple(modules)
            if requested:
                starting = self._controller.enable_many(requested, starting).new_active_set

            self._check_persistable(starting)

            record = TenantModuleSet(
                tenant_id=tenant_id,
                enabled_modules=sorted(starting),
                catalog_revision=self._controller.catalog.revision,
                updated_by_id=self._actor_id,
            )
            self.session.add(record)
            self.session.flush()

            logger.info(
                "tenant_modules_provisioned",
                extra={
                    "tenant_id": tenant_id,
                    "plan_id": plan_id,
                    "enabled_modules": sorted(starting),
                    "catalog_revision": record.catalog_revision,
                },
            )
            return self._to_dto(record)

    # ------------------------------------------------------------------
    # Changes
    # ------------------------------------------------------------------

    def enable(
        self,
        tenant_id: str,
        module_id: str,
        expected_version: int | None = None,
    ) -> EnableResult:
        with self._log_context(tenant_id):
            record = self._load(tenant_id, expected_version)
            result = self._controller.enable(module_id, record.module_set)
            self._save(record, result.new_active_set, expected_version)
            return result

    def enable_many(
        self,
        tenant_id: str,
        module_ids: Iterable[str],
        expected_version: int | None = None,
    ) -> EnableResult:
        with self._log_context(tenant_id):
            record = self._load(tenant_id, expected_version)
            result = self._controller.enable_many(module_ids, record.module_set)
            self._save(record, result.new_active_set, expected_version)
            return result

    def plan_disable(self, tenant_id: str, module_id: str) -> CascadeDecision:
        """Read-only first step of the two-step disable."""
        with self._log_context(tenant_id):
            record = self._load(tenant_id)
            return self._controller.plan_disable(module_id, record.module_set)

    def disable(
        self,
        tenant_id: str,
        module_id: str,
        expected_version: int | None = None,
    ) -> DisableResult:
        """Disable when the module can go alone; otherwise write nothing."""
        with self._log_context(tenant_id):
            record = self._load(tenant_id, expected_version)
            result = self._controller.disable(module_id, record.module_set)
            if not result.requires_confirmation:
                self._save(record, result.new_active_set, expected_version)
            return result

    def confirm_disable(
        self,
        tenant_id: str,
        module_id: str,
        expected_version: int | None = None,
    ) -> DisableResult:
        """
        Second step of the two-step disable: remove the whole cascade.

        Pass the version read alongside ``plan_disable`` as
        ``expected_version`` so a set changed in between is not cascaded
        blindly.
        """
        with self._log_context(tenant_id):
            record = self._load(tenant_id, expected_version)
            result = self._controller.confirm_disable(module_id, record.module_set)
            self._save(record, result.new_active_set, expected_version)
            return result

    def apply_bundle(
        self,
        tenant_id: str,
        bundle_id: str,
        expected_version: int | None = None,
    ) -> BundleResult:
        with self._log_context(tenant_id):
            record = self._load(tenant_id, expected_version)
            result = self._controller.apply_bundle(bundle_id, record.module_set)
            self._save(record, result.new_active_set, expected_version)
            return result

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _log_context(self, tenant_id: str):
        return LogContext.bind(
            tenant_id=tenant_id,
            actor_id=self._actor_id,
            catalog_revision=self._controller.catalog.revision,
        )

    def _load(
        self, tenant_id: str, expected_version: int | None = None
    ) -> TenantModuleSet:
        record = self.session.get(TenantModuleSet, tenant_id)
        if record is None:
            raise TenantNotFoundError(tenant_id)
        if expected_version is not None and record.version != expected_version:
            logger.warning(
                "tenant_modules_version_mismatch",
                extra={
                    "tenant_id": tenant_id,
                    "expected_version": expected_version,
                    "actual_version": record.version,
                },
            )
            raise StaleActiveSetError(tenant_id, expected_version, record.version)
        return record

    def _check_persistable(self, candidate: frozenset[str]) -> None:
        validation = self._controller.validate(candidate, require_non_empty=True)
        if not validation.valid:
            raise InvalidConfigurationError(list(validation.errors))

    def _save(
        self,
        record: TenantModuleSet,
        candidate: frozenset[str],
        expected_version: int | None,
    ) -> None:
        self._check_persistable(candidate)

        before = record.module_set
        revision = self._controller.catalog.revision
        if candidate == before and record.catalog_revision == revision:
            return

        diff = self._controller.diff(before, candidate)
        record.enabled_modules = sorted(candidate)
        record.catalog_revision = revision
        record.updated_by_id = self._actor_id
        try:
            self.session.flush()
        except StaleDataError as exc:
            logger.warning(
                "tenant_modules_concurrent_update",
                extra={"tenant_id": record.tenant_id},
            )
            raise StaleActiveSetError(record.tenant_id, expected_version, None) from exc

        logger.info(
            "tenant_modules_saved",
            extra={
                "tenant_id": record.tenant_id,
                "added": list(diff.added),
                "removed": list(diff.removed),
                "version": record.version,
                "catalog_revision": revision,
            },
        )

    @staticmethod
    def _to_dto(record: TenantModuleSet) -> TenantModuleSetInfo:
        return TenantModuleSetInfo(
            tenant_id=record.tenant_id,
            enabled_modules=record.module_set,
            catalog_revision=record.catalog_revision,
            version=record.version,
        )
