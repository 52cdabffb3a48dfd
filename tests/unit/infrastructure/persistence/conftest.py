"""Shared fixtures for persistence tests: file-backed SQLite through aiosqlite."""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from crudgate.infrastructure.database import create_session_factory


@pytest.fixture
async def make_session_factory(tmp_path):
    """Build a session factory over a fresh database holding metadata's tables and rows."""
    engines = []

    async def build(metadata, *rows):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / f'store{len(engines)}.db'}")
        engines.append(engine)
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        factory = create_session_factory(engine)
        if rows:
            async with factory() as session:
                session.add_all(rows)
                await session.commit()
        return factory

    yield build
    for engine in engines:
        await engine.dispose()
