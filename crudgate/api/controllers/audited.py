"""CRUD controller over an audited repository.

Writes go through the actor-aware repository calls using the actor id
carried by the request context.  A write without an actor is rejected as a
bad request after the permission and identity checks.
"""

from __future__ import annotations

from crudgate.api.results import ActionResult
from crudgate.domain.repositories.audited import A, AuditedRepository
from crudgate.domain.repositories.base import TId

from .crud import CRUDController


class AuditedCRUDController(CRUDController[A, TId]):
    repository: AuditedRepository[A, TId]

    def _write_precondition(self, operation: str) -> ActionResult | None:
        if self.context.actor_id is None:
            return self._reject(operation, "actor id must be supplied for audited writes.")
        return None

    def _queue_create(self, entity: A) -> None:
        self.repository.create(entity, actor_id=self.context.actor_id)

    def _queue_create_range(self, entities: list[A]) -> None:
        self.repository.create_range(entities, actor_id=self.context.actor_id)

    async def _apply_update(self, id: TId, entity: A, create_if_not_exists: bool) -> None:
        if create_if_not_exists:
            await self.repository.upsert(
                entity, actor_id=self.context.actor_id, create_if_not_exists=True
            )
        else:
            await self.repository.update(id, entity, actor_id=self.context.actor_id)

    async def _apply_update_range(self, entities: list[A], create_if_not_exists: bool) -> None:
        await self.repository.update_range(
            entities,
            actor_id=self.context.actor_id,
            create_if_not_exists=create_if_not_exists,
        )
