"""
Module: activation_services.db.base
Responsibility: Declarative base classes for the SQLAlchemy ORM models of the
    persistence adapter.  Provides the type annotation map for consistent
    column types and the TrackedBase mixin for audit timestamps.
Architecture position: Services > DB.  Lowest-level import target within
    activation_services.  MUST NOT import from models/ or services/.

Invariants enforced:
    - Timestamps are always timezone-aware (DateTime(timezone=True)).
    - TrackedBase provides created_at, updated_at and the acting user for
      every tracked row.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Contract:
        Every ORM model in activation_services inherits from Base (or
        TrackedBase).  Unlike a surrogate-key schema, each model declares
        its own natural primary key.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
    }


class TrackedBase(Base):
    """
    Abstract base with audit timestamps and actor tracking.

    Guarantees:
        - created_at is set to server NOW() on INSERT and never changes.
        - updated_at is set on INSERT and auto-updates on every UPDATE.
        - updated_by_id is nullable (system provisioning has no actor).
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    updated_by_id: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
