"""Column mixins shared by every ORM row.

Attribute names match the Entity / AuditedEntity field names; the generic
repositories map rows to domain models by name.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column


class IdentityMixin:
    """Integer surrogate key assigned by the store on insert."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class AuditMixin:
    """Actor / timestamp audit columns.  All nullable; stamped by the repository."""

    created_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
