"""Audited repository interface and the write-capability protocols.

Writable and AuditedWritable describe the two write surfaces.  Code that
must only ever write through actor-aware calls should be typed against
AuditedWritable; a type checker then rejects the unaudited forms.  At
runtime AuditedRepository still inherits Repository's signatures, and
calling a write without an actor raises UnsupportedOperationError.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterable
from typing import Protocol, TypeVar

from crudgate.domain.models.entity import AuditedEntity, Entity

from .base import Repository, TId

A = TypeVar("A", bound=AuditedEntity)
E_contra = TypeVar("E_contra", bound=Entity, contravariant=True)
A_contra = TypeVar("A_contra", bound=AuditedEntity, contravariant=True)


class Writable(Protocol[E_contra]):
    def create(self, entity: E_contra) -> None: ...

    async def update(self, id, entity: E_contra) -> None: ...

    async def save_changes(self) -> None: ...


class AuditedWritable(Protocol[A_contra]):
    def create(self, entity: A_contra, *, actor_id: int) -> None: ...

    async def update(self, id, entity: A_contra, *, actor_id: int) -> None: ...

    async def save_changes(self) -> None: ...


class AuditedRepository(Repository[A, TId]):
    """Repository that stamps actor and UTC timestamp metadata on writes.

    actor_id is keyword-only and every positional parameter keeps its
    place in the base signatures, so an unaudited call can never bind a
    flag as the actor; omitting actor_id raises UnsupportedOperationError.
    """

    @abstractmethod
    def create(self, entity: A, *, actor_id: int | None = None) -> None:
        """Stamp created_by / created_at, then queue the insert."""

    @abstractmethod
    def create_range(self, entities: Iterable[A], *, actor_id: int | None = None) -> None:
        """Stamp and queue every entity."""

    @abstractmethod
    async def update(self, id: TId, entity: A, *, actor_id: int | None = None) -> None:
        """Strict update stamping updated_by / updated_at."""

    @abstractmethod
    async def upsert(
        self,
        entity: A,
        create_if_not_exists: bool = False,
        *,
        actor_id: int | None = None,
    ) -> None:
        """Upsert stamping update metadata, or creation metadata on insert."""

    @abstractmethod
    async def update_range(
        self,
        entities: Iterable[A],
        create_if_not_exists: bool = False,
        *,
        actor_id: int | None = None,
    ) -> None:
        """Apply the audited upsert rule to each entity independently."""
