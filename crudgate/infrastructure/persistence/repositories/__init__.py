"""Concrete SQLAlchemy repository implementations.

Exports the generic SqlRepository classes and the repository_factory()
helper used for wiring at the application boundary (FastAPI dependency
injection).
"""

from __future__ import annotations

from collections.abc import Callable

from crudgate.infrastructure.persistence.unit_of_work import UnitOfWork

from .audited import SqlAuditedRepository
from .base import SqlReadOnlyRepository, SqlRepository

RepositoryFactory = Callable[[UnitOfWork], SqlReadOnlyRepository]


def repository_factory(
    entity_type: type,
    row_type: type,
    *,
    audited: bool = False,
    read_only: bool = False,
) -> RepositoryFactory:
    """Return a callable that binds a new repository to a unit of work.

    Intended for use from a FastAPI dependency:

        make_repository = repository_factory(Widget, WidgetRow)

        async def handler(uow: UnitOfWork = Depends(get_unit_of_work)) -> ...:
            repository = make_repository(uow)
            widget = await repository.get(widget_id)
    """
    if audited and read_only:
        raise ValueError("a repository cannot be both audited and read-only")
    if audited:
        cls: type[SqlReadOnlyRepository] = SqlAuditedRepository
    elif read_only:
        cls = SqlReadOnlyRepository
    else:
        cls = SqlRepository

    def make(uow: UnitOfWork) -> SqlReadOnlyRepository:
        return cls(uow, entity_type=entity_type, row_type=row_type)

    return make


__all__ = [
    "SqlReadOnlyRepository",
    "SqlRepository",
    "SqlAuditedRepository",
    "RepositoryFactory",
    "repository_factory",
]
