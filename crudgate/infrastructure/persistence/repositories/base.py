"""Generic SQLAlchemy repositories.

One implementation serves every resource: the domain model type and the
ORM row type are class attributes (or constructor arguments), and rows are
mapped to models by attribute name.

Reads select columns rather than mapped instances, so they never see the
unit of work's queued state.  Writes go through the unit of work and are
durable only after save_changes().
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterable
from typing import Any, ClassVar

from sqlalchemy import Select, inspect, select

from crudgate.domain.exceptions import InvalidArgumentError, NotFoundError
from crudgate.domain.repositories.base import ReadOnlyRepository, Repository, T, TId
from crudgate.infrastructure.persistence.unit_of_work import UnitOfWork


class SqlReadOnlyRepository(ReadOnlyRepository[T, TId]):
    entity_type: ClassVar[type]
    row_type: ClassVar[type]

    def __init__(
        self,
        uow: UnitOfWork,
        entity_type: type[T] | None = None,
        row_type: type | None = None,
    ) -> None:
        self._uow = uow
        if entity_type is not None:
            self.entity_type = entity_type
        if row_type is not None:
            self.row_type = row_type
        self._log = uow.context.get_logger(__name__)
        self._columns = tuple(attr.key for attr in inspect(self.row_type).column_attrs)
        self._pk = inspect(self.row_type).primary_key[0]

    @property
    def _name(self) -> str:
        return self.entity_type.__name__

    @staticmethod
    def _require(value: Any, name: str) -> None:
        if value is None:
            raise InvalidArgumentError(f"{name} cannot be None")

    def _to_domain(self, mapping: dict[str, Any]) -> T:
        return self.entity_type.model_validate(mapping)

    def _select(self) -> Select:
        return select(*(getattr(self.row_type, key) for key in self._columns))

    async def _iterate(self, stmt: Select) -> AsyncIterator[T]:
        async for mapping in self._uow.stream(stmt):
            yield self._to_domain(mapping)

    def get_all(self) -> AsyncIterator[T]:
        self._log.debug("Getting all %s entities", self._name)
        return self._iterate(self._select())

    async def get(self, id: TId) -> T | None:
        self._require(id, "id")
        self._log.debug("Getting %s entity with id %s", self._name, id)
        mapping = await self._uow.first(self._select().where(self._pk == id))
        return self._to_domain(mapping) if mapping is not None else None

    def get_range(self, ids: Iterable[TId]) -> AsyncIterator[T]:
        self._require(ids, "ids")
        ids = list(ids)
        self._log.debug(
            "Getting %s entities with id %s", self._name, ", ".join(map(str, ids))
        )
        return self._iterate(self._select().where(self._pk.in_(ids)))


class SqlRepository(SqlReadOnlyRepository[T, TId], Repository[T, TId]):
    # Columns an overwrite never touches once the row exists.
    protected_fields: ClassVar[frozenset[str]] = frozenset()

    def _values(self, entity: T) -> dict[str, Any]:
        data = entity.model_dump()
        return {key: data[key] for key in self._columns if key in data}

    def _queue_insert(self, entity: T) -> None:
        values = self._values(entity)
        if not entity.has_identity():
            values.pop(self._pk.key, None)
        row = self.row_type(**values)

        def assign_identity() -> None:
            entity.id = getattr(row, self._pk.key)

        self._uow.add(row, after_commit=assign_identity)

    def _overwrite(self, row: Any, entity: T) -> None:
        for key, value in self._values(entity).items():
            if key not in self.protected_fields:
                setattr(row, key, value)

    async def _upsert_one(
        self,
        entity: T,
        create_if_not_exists: bool,
        on_update: Callable[[T], None] | None = None,
        on_insert: Callable[[T], None] | None = None,
    ) -> None:
        row = await self._uow.get_tracked(self.row_type, entity.id)
        if row is not None:
            if on_update is not None:
                on_update(entity)
            self._overwrite(row, entity)
            self._log.debug("Queued update of %s %s", self._name, entity.id)
        elif create_if_not_exists:
            if on_insert is not None:
                on_insert(entity)
            self._queue_insert(entity)
            self._log.debug("Queued upsert-create of %s %s", self._name, entity.id)
        else:
            self._log.debug("%s %s not found, skipped", self._name, entity.id)

    def create(self, entity: T) -> None:
        self._require(entity, "entity")
        self._log.debug("Creating %s entity", self._name)
        self._queue_insert(entity)

    def create_range(self, entities: Iterable[T]) -> None:
        self._require(entities, "entities")
        entities = list(entities)
        self._log.debug("Creating %d %s entities", len(entities), self._name)
        for entity in entities:
            self._queue_insert(entity)

    async def update(self, id: TId, entity: T) -> None:
        self._require(id, "id")
        self._require(entity, "entity")
        self._log.debug("Updating %s entity with id %s", self._name, id)
        row = await self._uow.get_tracked(self.row_type, id)
        if row is None:
            raise NotFoundError(f"{self._name} {id} not found")
        self._overwrite(row, entity)

    async def upsert(self, entity: T, create_if_not_exists: bool = False) -> None:
        self._require(entity, "entity")
        await self._upsert_one(entity, create_if_not_exists)

    async def update_range(
        self, entities: Iterable[T], create_if_not_exists: bool = False
    ) -> None:
        self._require(entities, "entities")
        for entity in list(entities):
            await self._upsert_one(entity, create_if_not_exists)

    def delete(self, id: TId) -> None:
        self._require(id, "id")
        self._log.debug("Deleting %s entity with id %s", self._name, id)
        self._uow.remove(self.row_type, [id])

    def delete_range(self, ids: Iterable[TId]) -> None:
        self._require(ids, "ids")
        ids = list(ids)
        self._log.debug(
            "Deleting %s entities with id %s", self._name, ", ".join(map(str, ids))
        )
        self._uow.remove(self.row_type, ids, strict=False)

    async def save_changes(self) -> None:
        await self._uow.commit()
