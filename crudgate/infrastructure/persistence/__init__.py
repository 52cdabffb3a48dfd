"""Persistence package.

Exports the unit of work, the ORM column mixins, and all repository
implementations together with the DI factory.
"""

from crudgate.infrastructure.persistence.models import AuditMixin, IdentityMixin
from crudgate.infrastructure.persistence.repositories import (
    RepositoryFactory,
    SqlAuditedRepository,
    SqlReadOnlyRepository,
    SqlRepository,
    repository_factory,
)
from crudgate.infrastructure.persistence.unit_of_work import UnitOfWork, begin

__all__ = [
    "IdentityMixin",
    "AuditMixin",
    "UnitOfWork",
    "begin",
    "SqlReadOnlyRepository",
    "SqlRepository",
    "SqlAuditedRepository",
    "RepositoryFactory",
    "repository_factory",
]
