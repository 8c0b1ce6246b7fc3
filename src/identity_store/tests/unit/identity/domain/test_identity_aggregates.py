"""Unit tests for identity aggregates and value objects."""

from datetime import datetime, timedelta, timezone

import pytest

from identity.domain.aggregates import IdentityRole, IdentityUser
from identity.domain.queries import (
    FieldPredicate,
    Operator,
    RoleField,
    UserField,
    role_name_equals,
    role_name_starts_with,
    user_name_equals,
    user_name_starts_with,
)
from identity.domain.value_objects import (
    DEFAULT_ISSUER,
    Claim,
    UserLoginInfo,
    generate_id,
    new_stamp,
)


class TestIdentityUser:
    """Tests for the IdentityUser aggregate."""

    def test_defaults(self):
        """A new user has no id and a fresh concurrency stamp."""
        user = IdentityUser(user_name="alice")

        assert user.id is None
        assert user.concurrency_stamp
        assert user.access_failed_count == 0
        assert user.lockout_enabled is False

    def test_each_user_gets_its_own_stamp(self):
        """Concurrency stamps are not shared between instances."""
        assert IdentityUser().concurrency_stamp != IdentityUser().concurrency_stamp

    def test_equality_by_id(self):
        """Users with the same id are equal regardless of other fields."""
        user_id = generate_id()

        assert IdentityUser(id=user_id, user_name="a") == IdentityUser(
            id=user_id, user_name="b"
        )
        assert IdentityUser(id=generate_id()) != IdentityUser(id=generate_id())

    def test_unsaved_users_compare_by_identity(self):
        """Users without an id are only equal to themselves."""
        user = IdentityUser(user_name="alice")

        assert user == user
        assert user != IdentityUser(user_name="alice")

    def test_hashable(self):
        """Users can be placed in sets."""
        user_id = generate_id()

        assert len({IdentityUser(id=user_id), IdentityUser(id=user_id)}) == 1


class TestLockout:
    """Tests for lockout evaluation."""

    def test_not_locked_when_disabled(self):
        """Lockout end is ignored when lockout is disabled."""
        user = IdentityUser(
            lockout_enabled=False,
            lockout_end=datetime.now(timezone.utc) + timedelta(hours=1),
        )

        assert user.is_locked_out() is False

    def test_locked_until_end(self):
        """A future lockout end locks the user out."""
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        user = IdentityUser(lockout_enabled=True, lockout_end=now + timedelta(minutes=5))

        assert user.is_locked_out(now=now) is True
        assert user.is_locked_out(now=now + timedelta(minutes=10)) is False

    def test_naive_lockout_end_treated_as_utc(self):
        """Naive timestamps read back from the database are taken as UTC."""
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        user = IdentityUser(
            lockout_enabled=True, lockout_end=datetime(2024, 1, 1, 0, 5)
        )

        assert user.is_locked_out(now=now) is True


class TestIdentityRole:
    """Tests for the IdentityRole aggregate."""

    def test_equality_by_id(self):
        """Roles with the same id are equal."""
        role_id = generate_id()

        assert IdentityRole(name="a", id=role_id) == IdentityRole(name="b", id=role_id)
        assert IdentityRole(name="a") != IdentityRole(name="a")

    def test_str(self):
        """String form names the role."""
        assert str(IdentityRole(name="admin")) == "IdentityRole(admin)"


class TestValueObjects:
    """Tests for claims, logins and identifiers."""

    def test_claim_default_issuer(self):
        """Claims without an issuer use the local authority."""
        assert Claim("role", "admin").issuer == DEFAULT_ISSUER

    def test_claims_differ_by_issuer(self):
        """Issuer is part of a claim's identity."""
        assert Claim("c", "v", "i1") != Claim("c", "v", "i2")
        assert Claim("c", "v", "i1") == Claim("c", "v", "i1")

    def test_claim_is_immutable(self):
        """Claims cannot be changed after creation."""
        claim = Claim("c", "v")

        with pytest.raises(AttributeError):
            claim.value = "w"  # type: ignore[misc]

    def test_login_info_str(self):
        """Login info renders as provider:key."""
        assert str(UserLoginInfo("github", "42", "GitHub")) == "github:42"

    def test_generated_ids_are_unique_ulids(self):
        """Identifiers are 26-character ULIDs."""
        first, second = generate_id(), generate_id()

        assert first != second
        assert len(first) == 26

    def test_stamps_are_unique(self):
        """Stamps never repeat."""
        assert new_stamp() != new_stamp()


class TestQueryPredicates:
    """Tests for predicate helpers."""

    def test_user_name_helpers(self):
        """User name helpers build the expected predicates."""
        assert user_name_equals("bob") == FieldPredicate(
            UserField.USER_NAME, Operator.EQUALS, "bob"
        )
        assert user_name_starts_with("b").operator == Operator.STARTS_WITH

    def test_role_name_helpers(self):
        """Role name helpers target the role name field."""
        assert role_name_equals("admin").field == RoleField.NAME
        assert role_name_starts_with("ad").operator == Operator.STARTS_WITH
