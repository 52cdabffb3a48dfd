"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .entity import AuditedEntity, Entity
from .enums import CRUDAction
from .permissions import PermissionSet

__all__ = [
    "Entity",
    "AuditedEntity",
    "CRUDAction",
    "PermissionSet",
]
