"""Unit tests for the process-wide engine and session factory."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from infrastructure.database import dependencies
from infrastructure.database.dependencies import (
    close_database_connections,
    get_engine,
    get_sessionmaker,
)


@pytest_asyncio.fixture(autouse=True)
async def reset_engine():
    """Dispose the singleton engine after each test."""
    yield
    await close_database_connections()


@pytest.mark.asyncio
async def test_get_engine():
    """Test that get_engine returns an AsyncEngine."""
    engine = get_engine()

    assert isinstance(engine, AsyncEngine)
    assert engine.url.drivername == "postgresql+asyncpg"


@pytest.mark.asyncio
async def test_engine_is_singleton():
    """Test that the engine is cached and reused."""
    assert get_engine() is get_engine()


@pytest.mark.asyncio
async def test_sessionmaker_bound_to_engine():
    """Test that the session factory is bound to the singleton engine."""
    factory = get_sessionmaker()

    assert isinstance(factory, async_sessionmaker)
    assert factory.kw["bind"] is get_engine()
    assert get_sessionmaker() is factory


@pytest.mark.asyncio
async def test_close_resets_singletons():
    """Test that closing disposes the engine and forgets the factory."""
    first = get_engine()

    await close_database_connections()

    assert dependencies._engine is None
    assert dependencies._sessionmaker is None
    assert get_engine() is not first


@pytest.mark.asyncio
async def test_close_without_engine_is_noop():
    """Closing before any engine exists does nothing."""
    await close_database_connections()
    await close_database_connections()

    assert dependencies._engine is None
