"""
Typed Exception Hierarchy for the Activation Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the resolver are an admin API and a persistence layer. Both need
to tell "the caller referenced something that does not exist" apart from
"the catalog itself is broken" apart from "the resolver produced a result it
could not prove consistent". Parsing message strings for that is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        result = controller.enable(module_id, active_set)
    except UnknownModuleError as e:
        api_response(status=404, code=e.code, module=e.module_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ActivationError (base)
    |
    +-- UnknownReferenceError
    |   +-- UnknownModuleError
    |   +-- UnknownBundleError
    |   +-- UnknownPlanError
    |   +-- TenantNotFoundError
    |
    +-- CatalogIntegrityError
    |   +-- DependencyCycleError
    |
    +-- CatalogAssemblyError
    |
    +-- InconsistentResultError
    |
    +-- InvalidConfigurationError
    |
    +-- ConcurrencyError
        +-- StaleActiveSetError
        +-- TenantAlreadyProvisionedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                  | When Raised
-------------|-----------------------|-----------------------------------------
Reference    | UNKNOWN_MODULE        | Module id absent from the loaded catalog
             | UNKNOWN_BUNDLE        | Bundle id absent from the loaded catalog
             | UNKNOWN_PLAN          | Plan id absent from the loaded catalog
             | TENANT_NOT_FOUND      | No module record for the tenant
-------------|-----------------------|-----------------------------------------
Catalog      | CATALOG_INTEGRITY     | Unknown edge, self-reference, bad bundle
             | DEPENDENCY_CYCLE      | requires-graph is not acyclic
             | CATALOG_ASSEMBLY      | YAML fragments missing or malformed
-------------|-----------------------|-----------------------------------------
Result       | INCONSISTENT_RESULT   | Post-hoc validation of enable/bundle failed
             | INVALID_CONFIGURATION | Candidate set rejected at the persist gate
-------------|-----------------------|-----------------------------------------
Concurrency  | STALE_ACTIVE_SET      | Tenant record changed since it was read
             | TENANT_EXISTS         | Tenant provisioned twice

===============================================================================
HANDLING PATTERNS
===============================================================================

1. UnknownReferenceError is always a caller bug or a stale catalog. Surface
   it immediately; never retry.

2. CatalogIntegrityError is startup-only. Abort the process.

3. InconsistentResultError is a defect in the resolver. It is logged at
   ERROR before being raised; alert on it.

4. StaleActiveSetError: re-read the tenant record and re-run the operation.
   Every resolver operation is deterministic, so a retry is safe.

"""

from __future__ import annotations


class ActivationError(Exception):
    """
    Base exception for all activation kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ACTIVATION_ERROR"


# Reference errors


class UnknownReferenceError(ActivationError):
    """Base exception for identifiers absent from the loaded catalog."""

    code: str = "UNKNOWN_REFERENCE"


class UnknownModuleError(UnknownReferenceError):
    """Module id is not part of the loaded catalog."""

    code: str = "UNKNOWN_MODULE"

    def __init__(self, module_id: str):
        self.module_id = module_id
        super().__init__(f"Unknown module: {module_id!r}")


class UnknownBundleError(UnknownReferenceError):
    """Bundle id is not part of the loaded catalog."""

    code: str = "UNKNOWN_BUNDLE"

    def __init__(self, bundle_id: str):
        self.bundle_id = bundle_id
        super().__init__(f"Unknown bundle: {bundle_id!r}")


class UnknownPlanError(UnknownReferenceError):
    """Plan id is not part of the loaded catalog."""

    code: str = "UNKNOWN_PLAN"

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Unknown plan: {plan_id!r}")


class TenantNotFoundError(UnknownReferenceError):
    """No module record exists for the tenant."""

    code: str = "TENANT_NOT_FOUND"

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(f"No module configuration for tenant {tenant_id!r}")


# Catalog errors


class CatalogIntegrityError(ActivationError):
    """
    The catalog cannot be proven acyclic and internally consistent.

    Fatal and startup-time only. Carries every problem found, not just the
    first, so one failed load reports the whole catalog's defects.
    """

    code: str = "CATALOG_INTEGRITY"

    def __init__(self, catalog_id: str, problems: list[str]):
        self.catalog_id = catalog_id
        self.problems = list(problems)
        detail = "\n".join(f"  - {p}" for p in self.problems)
        super().__init__(
            f"Catalog '{catalog_id}' failed integrity checks "
            f"({len(self.problems)} problem(s)):\n{detail}"
        )


class DependencyCycleError(CatalogIntegrityError):
    """The requires-graph contains a cycle."""

    code: str = "DEPENDENCY_CYCLE"

    def __init__(self, catalog_id: str, cycle: list[str]):
        self.cycle = list(cycle)
        super().__init__(
            catalog_id,
            [f"Dependency cycle: {' -> '.join(self.cycle)}"],
        )


class CatalogAssemblyError(ActivationError):
    """Catalog fragments are missing, malformed, or fail source validation."""

    code: str = "CATALOG_ASSEMBLY"

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = list(errors or [])
        if self.errors:
            message = message + ":\n" + "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(message)


# Result errors


class InconsistentResultError(ActivationError):
    """
    A result the resolver produced failed its own post-hoc validation.

    Should never happen: it signals a defect in the closure engine or in
    load-time bundle validation, not a user-facing condition.
    """

    code: str = "INCONSISTENT_RESULT"

    def __init__(self, operation: str, errors: list[str]):
        self.operation = operation
        self.errors = list(errors)
        super().__init__(
            f"{operation} produced an inconsistent module set: "
            + "; ".join(self.errors)
        )


class InvalidConfigurationError(ActivationError):
    """A candidate module set was rejected before being persisted."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid module configuration: " + "; ".join(self.errors))


# Concurrency errors


class ConcurrencyError(ActivationError):
    """Base exception for concurrent-modification errors."""

    code: str = "CONCURRENCY_ERROR"


class StaleActiveSetError(ConcurrencyError):
    """The tenant's module record changed after it was read."""

    code: str = "STALE_ACTIVE_SET"

    def __init__(
        self,
        tenant_id: str,
        expected_version: int | None,
        actual_version: int | None,
    ):
        self.tenant_id = tenant_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Module configuration for tenant {tenant_id!r} was modified "
            f"concurrently (expected version {expected_version}, "
            f"found {actual_version})"
        )


class TenantAlreadyProvisionedError(ConcurrencyError):
    """A module record already exists for the tenant."""

    code: str = "TENANT_EXISTS"

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(f"Tenant {tenant_id!r} already has a module configuration")
