"""Domain probes for identity store operations.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events of the user and role stores.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class UserStoreProbe(Protocol):
    """Domain probe for user store operations."""

    def user_created(self, user_id: str, user_name: str | None) -> None:
        """Record that a user was created."""
        ...

    def user_updated(self, user_id: str) -> None:
        """Record that a user was updated."""
        ...

    def user_deleted(self, user_id: str) -> None:
        """Record that a user and its dependent rows were deleted."""
        ...

    def user_retrieved(self, user_id: str) -> None:
        """Record that a user was retrieved."""
        ...

    def user_not_found(self, lookup: str, value: str) -> None:
        """Record that a lookup matched no user."""
        ...

    def duplicate_user_name(self, user_name: str | None) -> None:
        """Record that a user name collided with an existing one."""
        ...

    def concurrency_failure(self, user_id: str) -> None:
        """Record that a write was rejected because of a stale stamp."""
        ...

    def write_failed(self, operation: str, user_id: str | None, error: str) -> None:
        """Record that a write failed for an unexpected integrity reason."""
        ...

    def claims_added(self, user_id: str, count: int) -> None:
        """Record that claims were added to a user."""
        ...

    def claims_removed(self, user_id: str, count: int) -> None:
        """Record that claim rows were removed from a user."""
        ...

    def claim_replaced(self, user_id: str, count: int) -> None:
        """Record that matching claim rows were rewritten."""
        ...

    def login_added(self, user_id: str, login_provider: str) -> None:
        """Record that an external login was bound to a user."""
        ...

    def login_removed(self, user_id: str, login_provider: str, removed: bool) -> None:
        """Record a login removal and whether a binding existed."""
        ...

    def token_set(self, user_id: str, login_provider: str, name: str) -> None:
        """Record that a token was created or overwritten."""
        ...

    def token_removed(
        self, user_id: str, login_provider: str, name: str, removed: bool
    ) -> None:
        """Record a token removal and whether the token existed."""
        ...

    def added_to_role(self, user_id: str, role_name: str) -> None:
        """Record that a user joined a role."""
        ...

    def removed_from_role(self, user_id: str, role_name: str, removed: bool) -> None:
        """Record a role removal and whether a membership existed."""
        ...

    def users_queried(self, predicate_count: int, result_count: int) -> None:
        """Record a filtered user query."""
        ...

    def with_context(self, context: ObservationContext) -> UserStoreProbe:
        """Create a new probe with observation context bound."""
        ...


class RoleStoreProbe(Protocol):
    """Domain probe for role store operations."""

    def role_created(self, role_id: str, name: str | None) -> None:
        """Record that a role was created."""
        ...

    def role_updated(self, role_id: str) -> None:
        """Record that a role was updated."""
        ...

    def role_deleted(self, role_id: str) -> None:
        """Record that a role and its dependent rows were deleted."""
        ...

    def role_not_found(self, lookup: str, value: str) -> None:
        """Record that a lookup matched no role."""
        ...

    def duplicate_role_name(self, name: str | None) -> None:
        """Record that a role name collided with an existing one."""
        ...

    def concurrency_failure(self, role_id: str) -> None:
        """Record that a write was rejected because of a stale stamp."""
        ...

    def write_failed(self, operation: str, role_id: str | None, error: str) -> None:
        """Record that a write failed for an unexpected integrity reason."""
        ...

    def claim_added(self, role_id: str, claim_type: str) -> None:
        """Record that a claim was added to a role."""
        ...

    def claims_removed(self, role_id: str, count: int) -> None:
        """Record that claim rows were removed from a role."""
        ...

    def roles_queried(self, predicate_count: int, result_count: int) -> None:
        """Record a filtered role query."""
        ...

    def with_context(self, context: ObservationContext) -> RoleStoreProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultUserStoreProbe:
    """Default implementation of UserStoreProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultUserStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserStoreProbe(logger=self._logger, context=context)

    def user_created(self, user_id: str, user_name: str | None) -> None:
        self._logger.info(
            "user_created",
            user_id=user_id,
            user_name=user_name,
            **self._get_context_kwargs(),
        )

    def user_updated(self, user_id: str) -> None:
        self._logger.info(
            "user_updated",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_deleted(self, user_id: str) -> None:
        self._logger.info(
            "user_deleted",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_retrieved(self, user_id: str) -> None:
        self._logger.debug(
            "user_retrieved",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_not_found(self, lookup: str, value: str) -> None:
        self._logger.debug(
            "user_not_found",
            lookup=lookup,
            value=value,
            **self._get_context_kwargs(),
        )

    def duplicate_user_name(self, user_name: str | None) -> None:
        self._logger.warning(
            "duplicate_user_name",
            user_name=user_name,
            **self._get_context_kwargs(),
        )

    def concurrency_failure(self, user_id: str) -> None:
        self._logger.warning(
            "user_concurrency_failure",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def write_failed(self, operation: str, user_id: str | None, error: str) -> None:
        self._logger.error(
            "user_write_failed",
            operation=operation,
            user_id=user_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def claims_added(self, user_id: str, count: int) -> None:
        self._logger.info(
            "user_claims_added",
            user_id=user_id,
            count=count,
            **self._get_context_kwargs(),
        )

    def claims_removed(self, user_id: str, count: int) -> None:
        self._logger.info(
            "user_claims_removed",
            user_id=user_id,
            count=count,
            **self._get_context_kwargs(),
        )

    def claim_replaced(self, user_id: str, count: int) -> None:
        self._logger.info(
            "user_claim_replaced",
            user_id=user_id,
            count=count,
            **self._get_context_kwargs(),
        )

    def login_added(self, user_id: str, login_provider: str) -> None:
        self._logger.info(
            "user_login_added",
            user_id=user_id,
            login_provider=login_provider,
            **self._get_context_kwargs(),
        )

    def login_removed(self, user_id: str, login_provider: str, removed: bool) -> None:
        self._logger.info(
            "user_login_removed",
            user_id=user_id,
            login_provider=login_provider,
            removed=removed,
            **self._get_context_kwargs(),
        )

    def token_set(self, user_id: str, login_provider: str, name: str) -> None:
        self._logger.debug(
            "user_token_set",
            user_id=user_id,
            login_provider=login_provider,
            name=name,
            **self._get_context_kwargs(),
        )

    def token_removed(
        self, user_id: str, login_provider: str, name: str, removed: bool
    ) -> None:
        self._logger.debug(
            "user_token_removed",
            user_id=user_id,
            login_provider=login_provider,
            name=name,
            removed=removed,
            **self._get_context_kwargs(),
        )

    def added_to_role(self, user_id: str, role_name: str) -> None:
        self._logger.info(
            "user_added_to_role",
            user_id=user_id,
            role_name=role_name,
            **self._get_context_kwargs(),
        )

    def removed_from_role(self, user_id: str, role_name: str, removed: bool) -> None:
        self._logger.info(
            "user_removed_from_role",
            user_id=user_id,
            role_name=role_name,
            removed=removed,
            **self._get_context_kwargs(),
        )

    def users_queried(self, predicate_count: int, result_count: int) -> None:
        self._logger.debug(
            "users_queried",
            predicate_count=predicate_count,
            result_count=result_count,
            **self._get_context_kwargs(),
        )


class DefaultRoleStoreProbe:
    """Default implementation of RoleStoreProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRoleStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultRoleStoreProbe(logger=self._logger, context=context)

    def role_created(self, role_id: str, name: str | None) -> None:
        self._logger.info(
            "role_created",
            role_id=role_id,
            name=name,
            **self._get_context_kwargs(),
        )

    def role_updated(self, role_id: str) -> None:
        self._logger.info(
            "role_updated",
            role_id=role_id,
            **self._get_context_kwargs(),
        )

    def role_deleted(self, role_id: str) -> None:
        self._logger.info(
            "role_deleted",
            role_id=role_id,
            **self._get_context_kwargs(),
        )

    def role_not_found(self, lookup: str, value: str) -> None:
        self._logger.debug(
            "role_not_found",
            lookup=lookup,
            value=value,
            **self._get_context_kwargs(),
        )

    def duplicate_role_name(self, name: str | None) -> None:
        self._logger.warning(
            "duplicate_role_name",
            name=name,
            **self._get_context_kwargs(),
        )

    def concurrency_failure(self, role_id: str) -> None:
        self._logger.warning(
            "role_concurrency_failure",
            role_id=role_id,
            **self._get_context_kwargs(),
        )

    def write_failed(self, operation: str, role_id: str | None, error: str) -> None:
        self._logger.error(
            "role_write_failed",
            operation=operation,
            role_id=role_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def claim_added(self, role_id: str, claim_type: str) -> None:
        self._logger.info(
            "role_claim_added",
            role_id=role_id,
            claim_type=claim_type,
            **self._get_context_kwargs(),
        )

    def claims_removed(self, role_id: str, count: int) -> None:
        self._logger.info(
            "role_claims_removed",
            role_id=role_id,
            count=count,
            **self._get_context_kwargs(),
        )

    def roles_queried(self, predicate_count: int, result_count: int) -> None:
        self._logger.debug(
            "roles_queried",
            predicate_count=predicate_count,
            result_count=result_count,
            **self._get_context_kwargs(),
        )
