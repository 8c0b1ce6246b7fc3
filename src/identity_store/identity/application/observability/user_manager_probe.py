"""Protocol for user manager observability.

Defines the interface for domain probes that capture application-level
events of UserManager operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class UserManagerProbe(Protocol):
    """Domain probe for user manager operations."""

    def validation_failed(self, user_name: str | None, error_codes: list[str]) -> None:
        """Record that a user was rejected before reaching the store."""
        ...

    def operation_failed(
        self, operation: str, user_id: str | None, error_codes: list[str]
    ) -> None:
        """Record that a manager operation returned a failed result."""
        ...

    def security_stamp_rotated(self, user_id: str | None) -> None:
        """Record that a user's security stamp was replaced."""
        ...

    def with_context(self, context: ObservationContext) -> UserManagerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultUserManagerProbe:
    """Default implementation of UserManagerProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultUserManagerProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserManagerProbe(logger=self._logger, context=context)

    def validation_failed(self, user_name: str | None, error_codes: list[str]) -> None:
        """Record that a user was rejected before reaching the store."""
        self._logger.warning(
            "user_validation_failed",
            user_name=user_name,
            error_codes=error_codes,
            **self._get_context_kwargs(),
        )

    def operation_failed(
        self, operation: str, user_id: str | None, error_codes: list[str]
    ) -> None:
        """Record that a manager operation returned a failed result."""
        self._logger.warning(
            "user_operation_failed",
            operation=operation,
            user_id=user_id,
            error_codes=error_codes,
            **self._get_context_kwargs(),
        )

    def security_stamp_rotated(self, user_id: str | None) -> None:
        """Record that a user's security stamp was replaced."""
        self._logger.debug(
            "security_stamp_rotated",
            user_id=user_id,
            **self._get_context_kwargs(),
        )
