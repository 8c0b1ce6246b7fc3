"""Unit tests for UserStore.

Tests verify user store behavior with a mocked session.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from identity.domain.aggregates import IdentityUser
from identity.domain.value_objects import Claim, UserLoginInfo, generate_id
from identity.infrastructure.models import UserClaimModel, UserLoginModel, UserModel
from identity.infrastructure.user_store import UserStore
from identity.ports.exceptions import RoleNotFoundError
from identity.ports.stores import (
    IQueryableUserStore,
    IUserAuthenticationTokenStore,
    IUserClaimStore,
    IUserEmailStore,
    IUserLoginStore,
    IUserRoleStore,
    IUserStore,
)


def scalar_result(value):
    """Build a mocked execute() result returning value from scalar()."""
    result = MagicMock()
    result.scalar.return_value = value
    result.scalar_one_or_none.return_value = value
    return result


def rowcount_result(count):
    """Build a mocked execute() result for UPDATE or DELETE."""
    result = MagicMock()
    result.rowcount = count
    return result


@pytest.fixture
def mock_probe():
    """Create mock store probe."""
    return MagicMock()


@pytest.fixture
def store(mock_session, mock_probe):
    """Create store with mock session."""
    return UserStore(session=mock_session, probe=mock_probe)


@pytest.fixture
def saved_user():
    """A user that already has an id."""
    return IdentityUser(
        user_name="alice",
        normalized_user_name="ALICE",
        id=generate_id(),
    )


class TestProtocolCompliance:
    """Tests for protocol compliance."""

    def test_implements_all_user_capabilities(self, store):
        """Store should implement every user capability."""
        for protocol in (
            IUserStore,
            IUserEmailStore,
            IUserClaimStore,
            IUserLoginStore,
            IUserAuthenticationTokenStore,
            IUserRoleStore,
            IQueryableUserStore,
        ):
            assert isinstance(store, protocol)


class TestCreate:
    """Tests for create method."""

    @pytest.mark.asyncio
    async def test_adds_new_user(self, store, mock_session, mock_probe):
        """Should add a user row and assign an id."""
        user = IdentityUser(user_name="alice", normalized_user_name="ALICE")
        mock_session.execute.return_value = scalar_result(False)

        result = await store.create(user)

        assert result.succeeded
        assert user.id is not None
        added = mock_session.add.call_args[0][0]
        assert isinstance(added, UserModel)
        assert added.id == user.id
        assert added.normalized_user_name == "ALICE"
        assert added.concurrency_stamp == user.concurrency_stamp
        mock_session.flush.assert_awaited_once()
        mock_probe.user_created.assert_called_once_with(user.id, "alice")

    @pytest.mark.asyncio
    async def test_keeps_preassigned_id(self, store, mock_session):
        """Should not replace an id chosen by the caller."""
        user = IdentityUser(user_name="alice", id="fixed-id")
        mock_session.execute.return_value = scalar_result(False)

        await store.create(user)

        assert user.id == "fixed-id"

    @pytest.mark.asyncio
    async def test_duplicate_name_fails(self, store, mock_session, mock_probe):
        """Should refuse a taken normalized name without writing."""
        user = IdentityUser(user_name="alice", normalized_user_name="ALICE")
        mock_session.execute.return_value = scalar_result(True)

        result = await store.create(user)

        assert not result.succeeded
        assert result.error_codes == ["DuplicateUserName"]
        mock_session.add.assert_not_called()
        mock_probe.duplicate_user_name.assert_called_once_with("alice")

    @pytest.mark.asyncio
    async def test_unique_index_violation_maps_to_duplicate(
        self, store, mock_session
    ):
        """A lost race on the unique index still reports DuplicateUserName."""
        user = IdentityUser(user_name="alice", normalized_user_name="ALICE")
        mock_session.execute.return_value = scalar_result(False)
        mock_session.flush.side_effect = IntegrityError(
            "INSERT",
            {},
            Exception("UNIQUE constraint failed: identity_users.normalized_user_name"),
        )

        result = await store.create(user)

        assert result.error_codes == ["DuplicateUserName"]

    @pytest.mark.asyncio
    async def test_other_integrity_error_maps_to_default(
        self, store, mock_session, mock_probe
    ):
        """Unrelated integrity failures report DefaultError."""
        user = IdentityUser(user_name="alice", normalized_user_name="ALICE")
        mock_session.execute.return_value = scalar_result(False)
        mock_session.flush.side_effect = IntegrityError(
            "INSERT", {}, Exception("NOT NULL constraint failed")
        )

        result = await store.create(user)

        assert result.error_codes == ["DefaultError"]
        mock_probe.write_failed.assert_called_once()


class TestUpdate:
    """Tests for update method."""

    @pytest.mark.asyncio
    async def test_rotates_concurrency_stamp(self, store, mock_session, saved_user):
        """A successful update hands the user a new stamp."""
        old_stamp = saved_user.concurrency_stamp
        mock_session.execute.side_effect = [scalar_result(False), rowcount_result(1)]

        result = await store.update(saved_user)

        assert result.succeeded
        assert saved_user.concurrency_stamp != old_stamp

    @pytest.mark.asyncio
    async def test_stale_stamp_fails(self, store, mock_session, mock_probe, saved_user):
        """No matching row means someone else wrote first."""
        old_stamp = saved_user.concurrency_stamp
        mock_session.execute.side_effect = [scalar_result(False), rowcount_result(0)]

        result = await store.update(saved_user)

        assert result.error_codes == ["ConcurrencyFailure"]
        assert saved_user.concurrency_stamp == old_stamp
        mock_probe.concurrency_failure.assert_called_once_with(saved_user.id)

    @pytest.mark.asyncio
    async def test_requires_id(self, store):
        """Users that were never created cannot be updated."""
        with pytest.raises(ValueError):
            await store.update(IdentityUser(user_name="ghost"))


class TestDelete:
    """Tests for delete method."""

    @pytest.mark.asyncio
    async def test_deletes_children_then_user(self, store, mock_session, saved_user):
        """Claims, logins, tokens and roles go before the user row."""
        mock_session.execute.return_value = rowcount_result(1)

        result = await store.delete(saved_user)

        assert result.succeeded
        statements = [call[0][0] for call in mock_session.execute.call_args_list]
        tables = [stmt.table.name for stmt in statements]
        assert tables == [
            "identity_user_claims",
            "identity_user_logins",
            "identity_user_tokens",
            "identity_user_roles",
            "identity_users",
        ]

    @pytest.mark.asyncio
    async def test_stale_stamp_rolls_back(
        self, store, mock_session, mock_probe, saved_user
    ):
        """A stale stamp aborts the whole delete."""
        mock_session.execute.return_value = rowcount_result(0)

        result = await store.delete(saved_user)

        assert result.error_codes == ["ConcurrencyFailure"]
        mock_probe.user_deleted.assert_not_called()


class TestClaims:
    """Tests for claim operations."""

    @pytest.mark.asyncio
    async def test_add_claims_builds_rows(self, store, mock_session, saved_user):
        """Each claim becomes one row owned by the user."""
        await store.add_claims(saved_user, [Claim("a", "1"), Claim("b", "2")])

        rows = mock_session.add_all.call_args[0][0]
        assert [type(row) for row in rows] == [UserClaimModel, UserClaimModel]
        assert [(r.user_id, r.claim_type, r.claim_value) for r in rows] == [
            (saved_user.id, "a", "1"),
            (saved_user.id, "b", "2"),
        ]

    @pytest.mark.asyncio
    async def test_claim_hook_can_be_overridden(self, mock_session, saved_user):
        """Subclasses control how claim rows are built."""

        class UppercaseStore(UserStore):
            def create_user_claim(self, user, claim):
                row = super().create_user_claim(user, claim)
                row.claim_value = claim.value.upper()
                return row

        store = UppercaseStore(session=mock_session)

        await store.add_claims(saved_user, [Claim("a", "x")])

        (row,) = mock_session.add_all.call_args[0][0]
        assert row.claim_value == "X"

    @pytest.mark.asyncio
    async def test_remove_claims_reports_count(
        self, store, mock_session, mock_probe, saved_user
    ):
        """Removal records the number of rows deleted."""
        mock_session.execute.return_value = rowcount_result(1)

        await store.remove_claims(saved_user, [Claim("a", "1"), Claim("b", "2")])

        assert mock_session.execute.await_count == 2
        mock_probe.claims_removed.assert_called_once_with(saved_user.id, 2)


class TestLoginsAndTokens:
    """Tests for login and token operations."""

    @pytest.mark.asyncio
    async def test_add_login_builds_row(self, store, mock_session, saved_user):
        """A login row carries provider, key and display name."""
        await store.add_login(saved_user, UserLoginInfo("github", "42", "GitHub"))

        row = mock_session.add.call_args[0][0]
        assert isinstance(row, UserLoginModel)
        assert (row.login_provider, row.provider_key, row.provider_display_name) == (
            "github",
            "42",
            "GitHub",
        )

    @pytest.mark.asyncio
    async def test_set_token_overwrites_existing(self, store, mock_session, saved_user):
        """An existing token row gets the new value."""
        existing = MagicMock()
        mock_session.execute.return_value = scalar_result(existing)

        await store.set_token(saved_user, "github", "access", "new")

        assert existing.value == "new"
        mock_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_token_creates_missing(self, store, mock_session, saved_user):
        """A missing token row is created."""
        mock_session.execute.return_value = scalar_result(None)

        await store.set_token(saved_user, "github", "access", "v1")

        row = mock_session.add.call_args[0][0]
        assert (row.user_id, row.login_provider, row.name, row.value) == (
            saved_user.id,
            "github",
            "access",
            "v1",
        )


class TestRoles:
    """Tests for role membership operations."""

    @pytest.mark.asyncio
    async def test_add_to_missing_role_raises(self, store, mock_session, saved_user):
        """Adding to an unknown role raises RoleNotFoundError."""
        mock_session.execute.return_value = scalar_result(None)

        with pytest.raises(RoleNotFoundError) as exc_info:
            await store.add_to_role(saved_user, "ADMIN")

        assert exc_info.value.role_name == "ADMIN"
        mock_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_remove_from_missing_role_is_noop(
        self, store, mock_session, mock_probe, saved_user
    ):
        """Removing from an unknown role does nothing."""
        mock_session.execute.return_value = scalar_result(None)

        await store.remove_from_role(saved_user, "ADMIN")

        assert mock_session.execute.await_count == 1
        mock_probe.removed_from_role.assert_called_once_with(
            saved_user.id, "ADMIN", False
        )
