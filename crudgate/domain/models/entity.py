"""Entity identity contract and the audited entity base.

These are pure domain objects with no ORM or persistence concerns.  Concrete
resources subclass Entity (or AuditedEntity) and declare their own fields;
the field names must match the column attribute names of the ORM row the
repository maps them to.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """Anything the repository can persist.

    id equal to unassigned_id means the store has not assigned an identity
    yet.  Subclasses with a non-integer key redeclare id and override
    unassigned_id (e.g. ``id: str = ""`` with ``unassigned_id = ""``).

    Entities are mutable: the repository writes the store-assigned id back
    after a successful commit.
    """

    model_config = ConfigDict(validate_assignment=True, from_attributes=True)

    unassigned_id: ClassVar[Any] = 0

    id: int = 0

    def has_identity(self) -> bool:
        return self.id != self.unassigned_id

    @classmethod
    def identity_type(cls) -> Any:
        """Annotation of the id field, used to type route path parameters."""
        return cls.model_fields["id"].annotation


class AuditedEntity(Entity):
    """Entity carrying actor-stamped creation and last-update metadata.

    created_by / created_at are stamped once, at creation, and never change.
    updated_by / updated_at stay None until the first successful update.
    """

    created_by: int | None = None
    created_at: datetime | None = None
    updated_by: int | None = None
    updated_at: datetime | None = None

    AUDIT_CREATE_FIELDS: ClassVar[tuple[str, ...]] = ("created_by", "created_at")
    AUDIT_UPDATE_FIELDS: ClassVar[tuple[str, ...]] = ("updated_by", "updated_at")
