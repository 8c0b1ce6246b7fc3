"""Integration test fixtures for the identity bounded context."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from identity.application.services import RoleManager, UserManager
from identity.domain.aggregates import IdentityRole, IdentityUser
from identity.domain.value_objects import generate_id
from identity.infrastructure.role_store import RoleStore
from identity.infrastructure.user_store import UserStore
from infrastructure.settings import IdentitySettings

CreateUser = Callable[..., Awaitable[IdentityUser]]
CreateRole = Callable[..., Awaitable[IdentityRole]]


@pytest.fixture
def identity_settings() -> IdentitySettings:
    """Identity policy used by the integration suites."""
    return IdentitySettings(require_unique_email=False)


@pytest.fixture
def user_store(session_factory: async_sessionmaker[AsyncSession]) -> UserStore:
    """Provide a user store with per-operation sessions."""
    return UserStore(session_factory)


@pytest.fixture
def role_store(session_factory: async_sessionmaker[AsyncSession]) -> RoleStore:
    """Provide a role store with per-operation sessions."""
    return RoleStore(session_factory)


@pytest.fixture
def user_manager(user_store: UserStore, identity_settings) -> UserManager:
    """Provide a user manager over the user store."""
    return UserManager(user_store, settings=identity_settings)


@pytest.fixture
def role_manager(role_store: RoleStore) -> RoleManager:
    """Provide a role manager over the role store."""
    return RoleManager(role_store)


@pytest.fixture
def create_test_user(user_manager: UserManager) -> CreateUser:
    """Factory creating persisted users with unique names.

    The name is name_prefix followed by a fresh id, unless
    use_name_prefix_as_user_name is set.
    """

    async def _create(
        name_prefix: str = "",
        email: str = "",
        phone_number: str = "",
        lockout_enabled: bool = False,
        lockout_end: datetime | None = None,
        use_name_prefix_as_user_name: bool = False,
    ) -> IdentityUser:
        user_name = (
            name_prefix if use_name_prefix_as_user_name else f"{name_prefix}{generate_id()}"
        )
        user = IdentityUser(
            user_name=user_name,
            email=email or None,
            phone_number=phone_number or None,
            lockout_enabled=lockout_enabled,
            lockout_end=lockout_end,
        )
        result = await user_manager.create(user)
        assert result.succeeded, str(result)
        return user

    return _create


@pytest.fixture
def create_test_role(role_manager: RoleManager) -> CreateRole:
    """Factory creating persisted roles with unique names."""

    async def _create(
        role_name_prefix: str = "", use_role_name_prefix_as_role_name: bool = False
    ) -> IdentityRole:
        name = (
            role_name_prefix
            if use_role_name_prefix_as_role_name
            else f"{role_name_prefix}{generate_id()}"
        )
        role = IdentityRole(name=name)
        result = await role_manager.create(role)
        assert result.succeeded, str(result)
        return role

    return _create
