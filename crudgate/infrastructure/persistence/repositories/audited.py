"""SQLAlchemy implementation of AuditedRepository."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import ClassVar

from crudgate.domain.exceptions import NotFoundError, UnsupportedOperationError
from crudgate.domain.models.entity import AuditedEntity
from crudgate.domain.repositories.audited import A, AuditedRepository
from crudgate.domain.repositories.base import TId

from .base import SqlRepository


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SqlAuditedRepository(SqlRepository[A, TId], AuditedRepository[A, TId]):
    """Writes require an actor id; created_* columns are never overwritten.

    The unaudited forms inherited from SqlRepository (any write called
    without actor_id) raise UnsupportedOperationError before anything is
    queued.
    """

    protected_fields: ClassVar[frozenset[str]] = frozenset(AuditedEntity.AUDIT_CREATE_FIELDS)

    clock: ClassVar[Callable[[], datetime]] = staticmethod(_utcnow)

    def _require_actor(self, actor_id: int | None, operation: str) -> int:
        if actor_id is None:
            raise UnsupportedOperationError(
                f"{type(self).__name__}.{operation} requires an actor_id; "
                "unaudited writes are not supported"
            )
        return actor_id

    def _stamp_created(self, actor_id: int) -> Callable[[A], None]:
        def stamp(entity: A) -> None:
            entity.created_by = actor_id
            entity.created_at = self.clock()
            entity.updated_by = None
            entity.updated_at = None

        return stamp

    def _stamp_updated(self, actor_id: int) -> Callable[[A], None]:
        def stamp(entity: A) -> None:
            entity.updated_by = actor_id
            entity.updated_at = self.clock()

        return stamp

    def create(self, entity: A, *, actor_id: int | None = None) -> None:
        actor_id = self._require_actor(actor_id, "create")
        self._require(entity, "entity")
        self._log.debug("Creating %s entity as actor %s", self._name, actor_id)
        self._stamp_created(actor_id)(entity)
        self._queue_insert(entity)

    def create_range(self, entities: Iterable[A], *, actor_id: int | None = None) -> None:
        actor_id = self._require_actor(actor_id, "create_range")
        self._require(entities, "entities")
        stamp = self._stamp_created(actor_id)
        for entity in list(entities):
            stamp(entity)
            self._queue_insert(entity)

    async def update(self, id: TId, entity: A, *, actor_id: int | None = None) -> None:
        actor_id = self._require_actor(actor_id, "update")
        self._require(id, "id")
        self._require(entity, "entity")
        self._log.debug("Updating %s entity with id %s as actor %s", self._name, id, actor_id)
        row = await self._uow.get_tracked(self.row_type, id)
        if row is None:
            raise NotFoundError(f"{self._name} {id} not found")
        self._stamp_updated(actor_id)(entity)
        self._overwrite(row, entity)

    async def upsert(
        self,
        entity: A,
        create_if_not_exists: bool = False,
        *,
        actor_id: int | None = None,
    ) -> None:
        actor_id = self._require_actor(actor_id, "upsert")
        self._require(entity, "entity")
        await self._upsert_one(
            entity,
            create_if_not_exists,
            on_update=self._stamp_updated(actor_id),
            on_insert=self._stamp_created(actor_id),
        )

    async def update_range(
        self,
        entities: Iterable[A],
        create_if_not_exists: bool = False,
        *,
        actor_id: int | None = None,
    ) -> None:
        actor_id = self._require_actor(actor_id, "update_range")
        self._require(entities, "entities")
        on_update = self._stamp_updated(actor_id)
        on_insert = self._stamp_created(actor_id)
        for entity in list(entities):
            await self._upsert_one(entity, create_if_not_exists, on_update, on_insert)
