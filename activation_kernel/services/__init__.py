"""Services for the activation kernel (orchestration over the domain layer)."""

from activation_kernel.services.activation_controller import (
    ActivationController,
    BundleResult,
    ChangeStatus,
    DisableResult,
    EnableResult,
)

__all__ = [
    "ActivationController",
    "BundleResult",
    "ChangeStatus",
    "DisableResult",
    "EnableResult",
]
