"""Transactional scoping for store operations.

Stores receive either a session factory (one session and transaction per
operation) or a caller-owned session (an external unit of work). SessionScope
hides the difference: every store operation runs inside exactly one
transaction, and anything that escapes the block, cancellation included,
rolls that transaction back.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.exceptions import DatabaseConnectionError
from infrastructure.observability import ConnectionProbe, DefaultConnectionProbe

SessionSource = async_sessionmaker[AsyncSession] | AsyncSession


class SessionScope:
    """Opens one transaction per store operation.

    With a session factory, each operation gets a fresh session that is
    closed afterwards. With an external session, the operation joins it:
    ``session.begin()`` when the session is idle, or a SAVEPOINT through
    ``session.begin_nested()`` when the caller already holds a transaction,
    so a failed operation never poisons the caller's unit of work.
    """

    def __init__(
        self,
        source: SessionSource,
        probe: ConnectionProbe | None = None,
    ) -> None:
        """Initialize the scope.

        Args:
            source: An async_sessionmaker or a caller-owned AsyncSession
            probe: Optional domain probe for observability
        """
        self._source = source
        self._probe = probe or DefaultConnectionProbe()

    @property
    def is_external(self) -> bool:
        """Whether operations join a caller-owned session."""
        return isinstance(self._source, AsyncSession)

    @asynccontextmanager
    async def transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Run a block inside a single transaction.

        Args:
            operation: Name of the store operation, used for observability

        Yields:
            The session bound to the open transaction

        Raises:
            DatabaseConnectionError: If the database could not be reached
        """
        try:
            if self.is_external:
                async with self._join(self._source) as session:  # type: ignore[arg-type]
                    yield session
            else:
                async with self._source() as session:  # type: ignore[operator]
                    async with session.begin():
                        yield session
        except (OperationalError, InterfaceError) as e:
            self._probe.connection_failed(operation, e)
            raise DatabaseConnectionError(
                f"Database unavailable during {operation}: {e}"
            ) from e
        except BaseException as e:
            self._probe.transaction_rolled_back(operation, e)
            raise

    @asynccontextmanager
    async def _join(self, session: AsyncSession) -> AsyncIterator[AsyncSession]:
        if session.in_transaction():
            async with session.begin_nested():
                yield session
        else:
            async with session.begin():
                yield session
