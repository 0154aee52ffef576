"""
Cascade Planner (``activation_kernel.domain.cascade``).

Responsibility
--------------
Given a module to disable and a tenant's current active set, decides
whether the module can go on its own and, if not, computes every active
module that has to go with it.

Architecture position
---------------------
**Kernel domain layer** -- pure function over an immutable
``ModuleCatalog``.  ZERO I/O.  Consumed by ``ActivationController`` for the
two-step plan/confirm disable protocol.

Invariants enforced
-------------------
* ``blocking_modules`` are the active modules whose closure contains the
  target (direct *or* transitive dependents).
* ``full_cascade_set`` is a fixed point: no active module outside it has a
  closure that intersects it.  Removing it therefore leaves no active
  module depending on anything removed.
* Disabling an inactive module is an idempotent no-op, not an error.

Termination
-----------
The cascade set only grows and is bounded by the finite active set.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from activation_kernel.domain.catalog import ModuleCatalog


@dataclass(frozen=True)
class CascadeDecision:
    """
    What disabling ``target`` would take with it.

    Contract:
        - ``can_disable_alone`` is True iff ``blocking_modules`` is empty.
        - ``full_cascade_set`` is ``target`` plus every module that must be
          disabled with it; empty when ``target`` is not active.
        - Collections are ordered: target first, then discovery order
          (catalog declaration order within each fixed-point round).
    """

    target: str
    can_disable_alone: bool
    blocking_modules: tuple[str, ...] = ()
    full_cascade_set: tuple[str, ...] = ()

    @property
    def is_noop(self) -> bool:
        return not self.full_cascade_set

    @property
    def requires_confirmation(self) -> bool:
        return not self.can_disable_alone


def plan_disable(
    catalog: ModuleCatalog,
    target: str,
    active_set: Iterable[str],
) -> CascadeDecision:
    """
    Plan the disable of ``target`` against ``active_set``.

    Raises:
        UnknownModuleError: if ``target`` or any member of ``active_set`` is
            not in the catalog.
    """
    catalog.require_module(target)
    active = catalog.normalize(active_set)

    if target not in active:
        return CascadeDecision(target=target, can_disable_alone=True)

    blocking = tuple(
        module_id
        for module_id in active
        if module_id != target and target in catalog.closure_of(module_id)
    )

    cascade: list[str] = [target]
    slated: set[str] = {target}
    grew = True
    while grew:
        grew = False
        for module_id in active:
            if module_id in slated:
                continue
            if slated.intersection(catalog.closure_of(module_id)):
                cascade.append(module_id)
                slated.add(module_id)
                grew = True

    return CascadeDecision(
        target=target,
        can_disable_alone=not blocking,
        blocking_modules=blocking,
        full_cascade_set=tuple(cascade),
    )
