"""Per-resource FastAPI routers.

Route signatures are built from the resource's entity type, so this module
keeps annotations evaluated at definition time (no postponed annotations).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import Response

from crudgate.api.controllers import (
    AuditedCRUDController,
    CRUDController,
    LegacyCRUDController,
    ReadOnlyController,
)
from crudgate.api.dependencies import get_unit_of_work
from crudgate.domain.models.entity import AuditedEntity, Entity
from crudgate.domain.models.enums import CRUDAction
from crudgate.infrastructure.persistence.repositories import repository_factory
from crudgate.infrastructure.persistence.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ControllerKind(str, Enum):
    CRUD = "crud"
    AUDITED = "audited"
    READ_ONLY = "read_only"
    LEGACY = "legacy"


_CONTROLLERS = {
    ControllerKind.CRUD: CRUDController,
    ControllerKind.AUDITED: AuditedCRUDController,
    ControllerKind.LEGACY: LegacyCRUDController,
}


@dataclass(frozen=True)
class Resource:
    """One exposed entity type.

    name is the route prefix.  allowed_actions empty means every action is
    allowed; it is ignored for read-only resources, which have no gate.
    """

    name: str
    entity_type: type[Entity]
    row_type: type
    allowed_actions: tuple[CRUDAction, ...] = field(default_factory=tuple)
    kind: ControllerKind = ControllerKind.CRUD

    def __post_init__(self) -> None:
        if self.kind is ControllerKind.AUDITED and not issubclass(
            self.entity_type, AuditedEntity
        ):
            raise TypeError(f"{self.entity_type.__name__} is not an AuditedEntity")


def build_router(resource: Resource) -> APIRouter:
    entity_type = resource.entity_type
    make_repository = repository_factory(
        entity_type,
        resource.row_type,
        audited=resource.kind is ControllerKind.AUDITED,
        read_only=resource.kind is ControllerKind.READ_ONLY,
    )

    if resource.kind is ControllerKind.READ_ONLY:

        def get_controller(uow: UnitOfWork = Depends(get_unit_of_work)) -> ReadOnlyController:
            return ReadOnlyController(
                make_repository(uow), context=uow.context, resource_name=entity_type.__name__
            )

        router = APIRouter(prefix=f"/{resource.name}", tags=[resource.name])
        _add_read_only_routes(router, entity_type, get_controller)
    else:
        controller_cls = _CONTROLLERS[resource.kind]

        def get_controller(uow: UnitOfWork = Depends(get_unit_of_work)) -> CRUDController:
            return controller_cls(
                make_repository(uow),
                *resource.allowed_actions,
                context=uow.context,
                resource_name=entity_type.__name__,
            )

        router = APIRouter(prefix=f"/{resource.name}", tags=[resource.name])
        legacy = resource.kind is ControllerKind.LEGACY
        _add_single_routes(router, entity_type, get_controller, legacy=legacy)
        if not legacy:
            _add_batch_routes(router, entity_type, get_controller)

    logger.debug("Built %s router for /%s", resource.kind.value, resource.name)
    return router


def _add_read_only_routes(router: APIRouter, entity_type: type[Entity], get_controller) -> None:
    id_type = entity_type.identity_type()

    @router.get("/{id}")
    async def read(id: id_type, controller: ReadOnlyController = Depends(get_controller)) -> Response:
        return (await controller.read(id)).to_response()

    @router.get("")
    async def read_many(
        ids: Optional[list[id_type]] = Query(default=None),
        controller: ReadOnlyController = Depends(get_controller),
    ) -> Response:
        if ids is None:
            result = await controller.read_all()
        else:
            result = await controller.read_range(ids)
        return result.to_response()


def _add_single_routes(
    router: APIRouter, entity_type: type[Entity], get_controller, legacy: bool = False
) -> None:
    id_type = entity_type.identity_type()

    @router.post("")
    async def create(
        entity: entity_type, controller: CRUDController = Depends(get_controller)
    ) -> Response:
        return (await controller.create(entity)).to_response()

    @router.get("/{id}")
    async def read(id: id_type, controller: CRUDController = Depends(get_controller)) -> Response:
        return (await controller.read(id)).to_response()

    @router.get("")
    async def read_all(controller: CRUDController = Depends(get_controller)) -> Response:
        return (await controller.read_all()).to_response()

    if legacy:

        @router.put("/{id}")
        async def update(
            id: id_type,
            entity: entity_type,
            controller: LegacyCRUDController = Depends(get_controller),
        ) -> Response:
            return (await controller.update(id, entity)).to_response()

    else:

        @router.put("/{id}")
        async def update(
            id: id_type,
            entity: entity_type,
            create_if_not_exists: bool = Query(default=False, alias="createIfNotExists"),
            controller: CRUDController = Depends(get_controller),
        ) -> Response:
            return (await controller.update(id, entity, create_if_not_exists)).to_response()

    @router.delete("/{id}")
    async def delete(id: id_type, controller: CRUDController = Depends(get_controller)) -> Response:
        return (await controller.delete(id)).to_response()


def _add_batch_routes(router: APIRouter, entity_type: type[Entity], get_controller) -> None:
    id_type = entity_type.identity_type()

    @router.post("/batch")
    async def create_range(
        entities: list[entity_type], controller: CRUDController = Depends(get_controller)
    ) -> Response:
        return (await controller.create_range(entities)).to_response()

    @router.put("")
    async def update_range(
        entities: list[entity_type],
        create_if_not_exists: bool = Query(default=False, alias="createIfNotExists"),
        controller: CRUDController = Depends(get_controller),
    ) -> Response:
        return (await controller.update_range(entities, create_if_not_exists)).to_response()

    @router.delete("")
    async def delete_range(
        ids: list[id_type] = Body(...),
        controller: CRUDController = Depends(get_controller),
    ) -> Response:
        return (await controller.delete_range(ids)).to_response()