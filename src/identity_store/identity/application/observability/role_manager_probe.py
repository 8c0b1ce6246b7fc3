"""Protocol for role manager observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class RoleManagerProbe(Protocol):
    """Domain probe for role manager operations."""

    def validation_failed(self, name: str | None, error_codes: list[str]) -> None:
        """Record that a role was rejected before reaching the store."""
        ...

    def operation_failed(
        self, operation: str, role_id: str | None, error_codes: list[str]
    ) -> None:
        """Record that a manager operation returned a failed result."""
        ...

    def with_context(self, context: ObservationContext) -> RoleManagerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRoleManagerProbe:
    """Default implementation of RoleManagerProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRoleManagerProbe:
        """Create a new probe with observation context bound."""
        return DefaultRoleManagerProbe(logger=self._logger, context=context)

    def validation_failed(self, name: str | None, error_codes: list[str]) -> None:
        self._logger.warning(
            "role_validation_failed",
            name=name,
            error_codes=error_codes,
            **self._get_context_kwargs(),
        )

    def operation_failed(
        self, operation: str, role_id: str | None, error_codes: list[str]
    ) -> None:
        self._logger.warning(
            "role_operation_failed",
            operation=operation,
            role_id=role_id,
            error_codes=error_codes,
            **self._get_context_kwargs(),
        )
