"""Creation and removal of the identity tables.

Registering the models on Base.metadata happens on import of
identity.infrastructure.models, which also covers row classes defined by
applications as long as they are imported before these functions run.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

import identity.infrastructure.models  # noqa: F401
from infrastructure.database.models import Base
from infrastructure.observability import ConnectionProbe, DefaultConnectionProbe


async def create_identity_schema(
    engine: AsyncEngine, probe: ConnectionProbe | None = None
) -> None:
    """Create every table registered on Base.metadata that does not exist yet."""
    probe = probe or DefaultConnectionProbe()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    probe.schema_created(sorted(Base.metadata.tables))


async def drop_identity_schema(engine: AsyncEngine) -> None:
    """Drop every table registered on Base.metadata."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
