"""ORM building blocks.

Resource rows are declared by the application on crudgate's shared Base
using these mixins; importing the row modules registers every mapper with
Base.metadata before SQLAlchemy runs.
"""

from crudgate.infrastructure.persistence.models.base import AuditMixin, IdentityMixin

__all__ = ["IdentityMixin", "AuditMixin"]
