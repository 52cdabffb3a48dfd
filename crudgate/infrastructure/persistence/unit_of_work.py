"""SQLAlchemy Unit of Work: one session, one transaction, explicit commit."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import asynccontextmanager
from typing import Any, NamedTuple

from sqlalchemy import Select, delete, inspect
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from crudgate.domain.context import RequestContext
from crudgate.domain.exceptions import NotFoundError


class _Removal(NamedTuple):
    row_type: type
    ids: list[Any]
    strict: bool


class UnitOfWork:
    """Queue of pending inserts, updates and removals over one AsyncSession.

    Inserts and updates are tracked by the session (autoflush must be off).
    Removals are queued by identity and executed at commit.  A strict
    removal that matched no row raises NotFoundError and rolls everything
    back; a non-strict one removes whatever matches.
    Nothing queued is visible to untracked reads before commit().
    """

    def __init__(self, session: AsyncSession, context: RequestContext | None = None) -> None:
        self._session = session
        self._context = context or RequestContext()
        self._log = self._context.get_logger(__name__)
        self._removals: list[_Removal] = []
        self._after_commit: list[Callable[[], None]] = []

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def context(self) -> RequestContext:
        return self._context

    @property
    def has_pending(self) -> bool:
        s = self._session
        return bool(s.new or s.dirty or s.deleted or self._removals)

    def add(self, row: object, after_commit: Callable[[], None] | None = None) -> None:
        self._session.add(row)
        if after_commit is not None:
            self._after_commit.append(after_commit)

    async def get_tracked(self, row_type: type, id: Any) -> Any | None:
        """Return the row for id: a pending insert if one is queued, else the stored row."""
        pending = self._pending(row_type, id)
        if pending is not None:
            return pending
        return await self._session.get(row_type, id)

    def _pending(self, row_type: type, id: Any) -> Any | None:
        # session.get() does not see unflushed inserts
        pk = inspect(row_type).primary_key[0].key
        for row in self._session.new:
            if isinstance(row, row_type) and getattr(row, pk, None) == id:
                return row
        return None

    def remove(self, row_type: type, ids: Iterable[Any], strict: bool = True) -> None:
        self._removals.append(_Removal(row_type, list(dict.fromkeys(ids)), strict))

    async def stream(self, stmt: Select) -> AsyncIterator[dict[str, Any]]:
        """Run a column-level select and yield plain mappings, bypassing the identity map."""
        result = await self._session.execute(stmt)
        for mapping in result.mappings():
            yield dict(mapping)

    async def first(self, stmt: Select) -> dict[str, Any] | None:
        result = await self._session.execute(stmt)
        mapping = result.mappings().first()
        return dict(mapping) if mapping is not None else None

    async def commit(self) -> None:
        try:
            await self._session.flush()
            for removal in self._removals:
                await self._execute_removal(removal)
            await self._session.commit()
        except BaseException:
            self._log.debug("commit failed, rolling back")
            await self._discard()
            raise
        self._removals.clear()
        callbacks, self._after_commit = self._after_commit, []
        for callback in callbacks:
            callback()
        self._log.debug("commit OK")

    async def rollback(self) -> None:
        await self._discard()

    async def _discard(self) -> None:
        self._removals.clear()
        self._after_commit.clear()
        await self._session.rollback()

    async def _execute_removal(self, removal: _Removal) -> None:
        row_type, ids, strict = removal
        if not ids:
            return
        pk = row_type.__mapper__.primary_key[0]
        stmt = delete(row_type).where(pk.in_(ids)).execution_options(synchronize_session=False)
        result = await self._session.execute(stmt)
        if result.rowcount != len(ids):
            message = (
                f"{row_type.__name__}: {len(ids) - result.rowcount} of "
                f"{len(ids)} identities not found ({', '.join(map(str, ids))})"
            )
            if strict:
                raise NotFoundError(message)
            self._log.debug("%s, skipped", message)


@asynccontextmanager
async def begin(
    session_factory: async_sessionmaker[AsyncSession],
    context: RequestContext | None = None,
) -> AsyncIterator[UnitOfWork]:
    """Open a unit of work; anything left uncommitted on exit is discarded."""
    async with session_factory() as session:
        uow = UnitOfWork(session, context)
        try:
            yield uow
        finally:
            if uow.has_pending:
                await uow.rollback()
