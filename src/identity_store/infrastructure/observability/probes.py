"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class ConnectionProbe(Protocol):
    """Domain probe for database connection observability.

    This probe captures domain-significant events related to database
    engines and sessions without exposing logging implementation details.
    """

    def engine_created(self, url: str) -> None:
        """Record that a database engine was created."""
        ...

    def engine_disposed(self) -> None:
        """Record that a database engine and its pool were disposed."""
        ...

    def connection_failed(self, operation: str, error: Exception) -> None:
        """Record that a database operation failed to reach the database."""
        ...

    def transaction_rolled_back(self, operation: str, error: BaseException) -> None:
        """Record that a store transaction was rolled back."""
        ...

    def schema_created(self, tables: list[str]) -> None:
        """Record that the identity schema was created."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionProbe:
    """Default implementation of ConnectionProbe using structlog.

    Supports observation context for including request-scoped metadata
    with all log events.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultConnectionProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectionProbe(logger=self._logger, context=context)

    def engine_created(self, url: str) -> None:
        """Record that a database engine was created."""
        self._logger.info(
            "database_engine_created",
            url=url,
            **self._get_context_kwargs(),
        )

    def engine_disposed(self) -> None:
        """Record that a database engine and its pool were disposed."""
        self._logger.info(
            "database_engine_disposed",
            **self._get_context_kwargs(),
        )

    def connection_failed(self, operation: str, error: Exception) -> None:
        """Record that a database operation failed to reach the database."""
        self._logger.error(
            "database_connection_failed",
            operation=operation,
            error=str(error),
            **self._get_context_kwargs(),
        )

    def transaction_rolled_back(self, operation: str, error: BaseException) -> None:
        """Record that a store transaction was rolled back."""
        self._logger.warning(
            "transaction_rolled_back",
            operation=operation,
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def schema_created(self, tables: list[str]) -> None:
        """Record that the identity schema was created."""
        self._logger.info(
            "identity_schema_created",
            tables=tables,
            **self._get_context_kwargs(),
        )
