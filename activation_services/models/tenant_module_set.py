"""
Module: activation_services.models.tenant_module_set
Responsibility: ORM persistence for one tenant's active module set.
Architecture position: Services > Models.  May import from db/base.py only.
Invariants enforced:
    - enabled_modules is stored sorted so equal sets serialize identically.
    - version is SQLAlchemy's version_id_col: every UPDATE is conditioned on
      the version that was read, so a concurrent writer raises StaleDataError
      instead of silently overwriting.
Failure modes:
    - sqlalchemy.orm.exc.StaleDataError on a lost update (translated to
      StaleActiveSetError by TenantModuleService).
Audit relevance:
    catalog_revision records which catalog revision last validated the set,
    so a stored set can be re-checked after the catalog changes.
"""

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from activation_services.db.base import TrackedBase


class TenantModuleSet(TrackedBase):
    """
    The persisted active set of one tenant.

    Contract:
        Rows are written only by TenantModuleService, and only with a
        candidate that has passed the persist gate.
    Non-goals:
        - No per-module history; the structured log carries the change
          events.
    """

    __tablename__ = "tenant_module_sets"

    tenant_id: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
    )

    # Sorted list of module ids
    enabled_modules: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    # Revision of the catalog that last validated this set
    catalog_revision: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="",
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<TenantModuleSet {self.tenant_id}: {','.join(self.enabled_modules)} v{self.version}>"

    @property
    def module_set(self) -> frozenset[str]:
        return frozenset(self.enabled_modules)
