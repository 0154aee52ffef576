"""
activation_services -- persistence adapter for tenant module sets.

Reads a tenant's active set, runs the activation controller against it,
re-validates the candidate at the persist gate and writes it back under
optimistic concurrency.  The kernel never imports this package.
"""

from activation_services.services.tenant_module_service import (
    TenantModuleService,
    TenantModuleSetInfo,
)

__all__ = [
    "TenantModuleService",
    "TenantModuleSetInfo",
]
