"""Unit test fixtures with mocked dependencies."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.settings import IdentitySettings


@pytest.fixture
def mock_session():
    """Provide a mocked caller-owned session with no open transaction.

    Passing spec=AsyncSession makes isinstance(mock, AsyncSession) hold, so
    stores treat it as an external session; execute() is awaitable and add()
    is not.
    """
    session = AsyncMock(spec=AsyncSession)
    session.in_transaction.return_value = False
    return session


@pytest.fixture
def identity_settings() -> IdentitySettings:
    """Provide identity settings independent of the environment."""
    return IdentitySettings(
        require_unique_email=False,
        allowed_user_name_characters=(
            "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-._@+"
        ),
    )
