"""Read-only controller for query-only resources.

There is no permission gate: every read is allowed.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Generic

from crudgate.api.results import ActionResult, not_found, ok
from crudgate.domain.context import RequestContext
from crudgate.domain.repositories.base import ReadOnlyRepository, T, TId


class ReadOnlyController(Generic[T, TId]):
    def __init__(
        self,
        repository: ReadOnlyRepository[T, TId],
        context: RequestContext | None = None,
        resource_name: str | None = None,
    ) -> None:
        self.repository = repository
        self.context = context or RequestContext()
        self._log = self.context.get_logger(__name__)
        entity_type = getattr(repository, "entity_type", None)
        self._name = resource_name or getattr(entity_type, "__name__", "entity")

    async def read(self, id: TId) -> ActionResult:
        self._log.debug("read %s.id = %s", self._name, id)
        entity = await self.repository.get(id)
        if entity is None:
            message = f"{self._name} {id} not found."
            self._log.debug("read NOT FOUND - %s", message)
            return not_found(message)
        self._log.debug("read OK")
        return ok(entity)

    async def read_range(self, ids: Iterable[TId]) -> ActionResult:
        ids = list(ids)
        self._log.debug(
            "read_range %d %s.id = %s", len(ids), self._name, ", ".join(map(str, ids))
        )
        entities = [entity async for entity in self.repository.get_range(ids)]
        self._log.debug("read_range OK")
        return ok(entities)

    async def read_all(self) -> ActionResult:
        self._log.debug("read_all %s", self._name)
        entities = [entity async for entity in self.repository.get_all()]
        self._log.debug("read_all OK")
        return ok(entities)
