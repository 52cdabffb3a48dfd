"""Generic repository base interfaces.

ReadOnlyRepository[T, TId] and Repository[T, TId] are the root abstractions
for all data-access interfaces.  Concrete implementations live in
crudgate/infrastructure/persistence/ and are wired at the application
boundary via dependency injection.

Design notes:
  - Every write only queues a mutation on the repository's unit of work;
    nothing is durable, or visible to any read path, until save_changes().
  - Calls that need a store lookup are coroutines.  Pure queuing calls
    (create, delete and their range forms) are plain methods.
  - T is the domain model type (never an ORM row).
  - Range reads return async iterators that run their query lazily, once
    per iteration, against the store rather than the tracked state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable
from typing import Generic, TypeVar

from crudgate.domain.models.entity import Entity

T = TypeVar("T", bound=Entity)
TId = TypeVar("TId")


class ReadOnlyRepository(ABC, Generic[T, TId]):
    """Untracked query interface for a single entity type."""

    @abstractmethod
    def get_all(self) -> AsyncIterator[T]:
        """Return a lazy iterator over every stored entity."""

    @abstractmethod
    async def get(self, id: TId) -> T | None:
        """Return the entity with the given identity, or None if not found.

        Raises InvalidArgumentError when id is None.
        """

    @abstractmethod
    def get_range(self, ids: Iterable[TId]) -> AsyncIterator[T]:
        """Return a lazy iterator over the entities whose identity is in ids.

        Raises InvalidArgumentError immediately when ids is None.
        """


class Repository(ReadOnlyRepository[T, TId]):
    """Read/write interface backed by a unit of work."""

    @abstractmethod
    def create(self, entity: T) -> None:
        """Queue an insert.  Identity is not checked; duplicates fail at commit."""

    @abstractmethod
    def create_range(self, entities: Iterable[T]) -> None:
        """Queue an insert for every entity."""

    @abstractmethod
    async def update(self, id: TId, entity: T) -> None:
        """Overwrite the stored entity matching id.  Raises NotFoundError on a miss."""

    @abstractmethod
    async def upsert(self, entity: T, create_if_not_exists: bool = False) -> None:
        """Overwrite the entity matching entity.id.

        On a miss the entity is queued for insert when create_if_not_exists
        is true; otherwise nothing happens and no error is raised.
        """

    @abstractmethod
    async def update_range(
        self, entities: Iterable[T], create_if_not_exists: bool = False
    ) -> None:
        """Apply the upsert rule to each entity independently."""

    @abstractmethod
    def delete(self, id: TId) -> None:
        """Queue removal by identity.  A missing identity fails at commit."""

    @abstractmethod
    def delete_range(self, ids: Iterable[TId]) -> None:
        """Queue removal of every identity in ids; identities with no stored row are skipped."""

    @abstractmethod
    async def save_changes(self) -> None:
        """Commit every queued mutation as one atomic operation."""
