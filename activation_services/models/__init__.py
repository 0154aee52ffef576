"""ORM models for the persistence adapter."""

from activation_services.models.tenant_module_set import TenantModuleSet

__all__ = ["TenantModuleSet"]
