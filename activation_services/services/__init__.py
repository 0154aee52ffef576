"""Tenant-scoped services of the persistence adapter."""

from activation_services.services.tenant_module_service import (
    TenantModuleService,
    TenantModuleSetInfo,
)

__all__ = ["TenantModuleService", "TenantModuleSetInfo"]
