"""Permission-gated CRUD controller.

Every action runs the same sequence: permission gate, identity
precondition, repository call, commit, result.  The first two steps return
before the repository is touched, so a refused request has no side effects.
Conflicts raised by the store at commit are not caught here.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Generic

from crudgate.api.results import ActionResult, bad_request, forbidden, not_found, ok
from crudgate.domain.context import RequestContext
from crudgate.domain.exceptions import NotFoundError
from crudgate.domain.models.enums import CRUDAction
from crudgate.domain.models.permissions import PermissionSet
from crudgate.domain.repositories.base import Repository, T, TId


class CRUDController(Generic[T, TId]):
    """Async CRUD surface over one repository.

    Constructed with no actions, every CRUD action is allowed; otherwise
    only the listed ones.  Read is gated like any other action.
    """

    def __init__(
        self,
        repository: Repository[T, TId],
        *allowed_actions: CRUDAction,
        context: RequestContext | None = None,
        resource_name: str | None = None,
    ) -> None:
        self.repository = repository
        self.permissions = PermissionSet(*allowed_actions)
        self.context = context or RequestContext()
        self._log = self.context.get_logger(__name__)
        entity_type = getattr(repository, "entity_type", None)
        self._name = resource_name or getattr(entity_type, "__name__", "entity")

    # --- steps shared by every action ---

    def _gate(self, action: CRUDAction, operation: str) -> ActionResult | None:
        if self.permissions.is_allowed(action):
            return None
        message = f"{action.value.capitalize()} forbidden on {self._name}"
        self._log.debug("%s FORBIDDEN - %s", operation, message)
        return forbidden(message)

    def _reject(self, operation: str, message: str) -> ActionResult:
        self._log.debug("%s BAD REQUEST - %s", operation, message)
        return bad_request(message)

    def _missing(self, operation: str, message: str) -> ActionResult:
        self._log.debug("%s NOT FOUND - %s", operation, message)
        return not_found(message)

    def _done(self, operation: str, content=None) -> ActionResult:
        self._log.debug("%s OK", operation)
        return ok(content)

    def _write_precondition(self, operation: str) -> ActionResult | None:
        """Extra check run after identity validation; None means proceed."""
        return None

    # --- repository calls, overridden by the audited controller ---

    def _queue_create(self, entity: T) -> None:
        self.repository.create(entity)

    def _queue_create_range(self, entities: list[T]) -> None:
        self.repository.create_range(entities)

    async def _apply_update(self, id: TId, entity: T, create_if_not_exists: bool) -> None:
        if create_if_not_exists:
            await self.repository.upsert(entity, create_if_not_exists=True)
        else:
            await self.repository.update(id, entity)

    async def _apply_update_range(self, entities: list[T], create_if_not_exists: bool) -> None:
        await self.repository.update_range(entities, create_if_not_exists=create_if_not_exists)

    # --- actions ---

    async def create(self, entity: T) -> ActionResult:
        self._log.debug("create %s", self._name)
        denied = self._gate(CRUDAction.CREATE, "create")
        if denied is not None:
            return denied

        if entity.has_identity():
            return self._reject("create", f"{self._name}.id must NOT be predefined.")
        invalid = self._write_precondition("create")
        if invalid is not None:
            return invalid

        self._queue_create(entity)
        await self.repository.save_changes()
        return self._done("create")

    async def create_range(self, entities: Iterable[T]) -> ActionResult:
        entities = list(entities)
        self._log.debug("create_range %d %s", len(entities), self._name)
        denied = self._gate(CRUDAction.CREATE, "create_range")
        if denied is not None:
            return denied

        if any(e.has_identity() for e in entities):
            return self._reject("create_range", f"{self._name}.id must NOT be predefined.")
        invalid = self._write_precondition("create_range")
        if invalid is not None:
            return invalid

        self._queue_create_range(entities)
        await self.repository.save_changes()
        return self._done("create_range")

    async def read(self, id: TId) -> ActionResult:
        self._log.debug("read %s %s", self._name, id)
        denied = self._gate(CRUDAction.READ, "read")
        if denied is not None:
            return denied

        entity = await self.repository.get(id)
        if entity is None:
            return self._missing("read", f"{self._name} {id} not found.")
        return self._done("read", entity)

    async def read_all(self) -> ActionResult:
        self._log.debug("read_all %s", self._name)
        denied = self._gate(CRUDAction.READ, "read_all")
        if denied is not None:
            return denied

        entities = [entity async for entity in self.repository.get_all()]
        return self._done("read_all", entities)

    async def update(
        self, id: TId, entity: T, create_if_not_exists: bool = False
    ) -> ActionResult:
        self._log.debug("update %s %s", self._name, id)
        denied = self._gate(CRUDAction.UPDATE, "update")
        if denied is not None:
            return denied

        if not entity.has_identity():
            return self._reject("update", "id must be defined.")
        if entity.id != id:
            return self._reject("update", f"id {id} does not match {self._name}.id {entity.id}.")
        invalid = self._write_precondition("update")
        if invalid is not None:
            return invalid

        try:
            await self._apply_update(id, entity, create_if_not_exists)
        except NotFoundError:
            return self._missing("update", f"{self._name} {entity.id} not found.")

        await self.repository.save_changes()
        return self._done("update")

    async def update_range(
        self, entities: Iterable[T], create_if_not_exists: bool = False
    ) -> ActionResult:
        entities = list(entities)
        self._log.debug("update_range %d %s", len(entities), self._name)
        denied = self._gate(CRUDAction.UPDATE, "update_range")
        if denied is not None:
            return denied

        if not all(e.has_identity() for e in entities):
            return self._reject("update_range", "id must be defined.")
        invalid = self._write_precondition("update_range")
        if invalid is not None:
            return invalid

        await self._apply_update_range(entities, create_if_not_exists)
        await self.repository.save_changes()
        return self._done("update_range")

    async def delete(self, id: TId) -> ActionResult:
        self._log.debug("delete %s %s", self._name, id)
        denied = self._gate(CRUDAction.DELETE, "delete")
        if denied is not None:
            return denied

        try:
            self.repository.delete(id)
            await self.repository.save_changes()
        except NotFoundError:
            return self._missing("delete", f"{self._name} {id} not found.")
        return self._done("delete")

    async def delete_range(self, ids: Iterable[TId]) -> ActionResult:
        ids = list(ids)
        self._log.debug("delete_range %d %s", len(ids), self._name)
        denied = self._gate(CRUDAction.DELETE, "delete_range")
        if denied is not None:
            return denied

        self.repository.delete_range(ids)
        await self.repository.save_changes()
        return self._done("delete_range")
