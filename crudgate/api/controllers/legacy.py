"""Deprecated single-entity CRUD controller, kept for existing resources.

Exposes only create / read / read_all / update / delete, and update always
uses the strict repository form (404 on a missing identity, never an
upsert).  The permission, validation, delegation and commit order is the
one CRUDController uses.
"""

from __future__ import annotations

import warnings

from crudgate.api.results import ActionResult
from crudgate.domain.context import RequestContext
from crudgate.domain.models.enums import CRUDAction
from crudgate.domain.repositories.base import Repository, T, TId

from .crud import CRUDController


class LegacyCRUDController(CRUDController[T, TId]):
    def __init__(
        self,
        repository: Repository[T, TId],
        *allowed_actions: CRUDAction,
        context: RequestContext | None = None,
        resource_name: str | None = None,
    ) -> None:
        warnings.warn(
            "LegacyCRUDController is deprecated; use CRUDController and pass "
            "the allowed CRUDActions instead",
            DeprecationWarning,
            stacklevel=2,
        )
        super().__init__(
            repository, *allowed_actions, context=context, resource_name=resource_name
        )

    async def update(self, id: TId, entity: T) -> ActionResult:  # type: ignore[override]
        return await super().update(id, entity, create_if_not_exists=False)
