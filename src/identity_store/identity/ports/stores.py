"""Store protocols (ports) for the identity bounded context.

Each protocol is one capability. A store may implement any subset; the
managers check for a capability with isinstance() before using it, which
is why every protocol is runtime_checkable.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from identity.domain.aggregates import IdentityRole, IdentityUser
from identity.domain.queries import FieldPredicate
from identity.domain.results import IdentityResult
from identity.domain.value_objects import Claim, UserLoginInfo


@runtime_checkable
class IUserStore(Protocol):
    """Core persistence for users."""

    async def create(self, user: IdentityUser) -> IdentityResult:
        """Persist a new user.

        Assigns user.id when unset.

        Returns:
            Success, or DuplicateUserName when the normalized name is taken
        """
        ...

    async def update(self, user: IdentityUser) -> IdentityResult:
        """Persist changes to an existing user.

        The stored concurrency stamp must equal user.concurrency_stamp; on
        success the user receives a fresh stamp.

        Returns:
            Success, ConcurrencyFailure or DuplicateUserName
        """
        ...

    async def delete(self, user: IdentityUser) -> IdentityResult:
        """Delete a user together with its claims, logins, tokens and role links.

        Returns:
            Success or ConcurrencyFailure
        """
        ...

    async def find_by_id(self, user_id: str) -> IdentityUser | None:
        """Retrieve a user by id."""
        ...

    async def find_by_name(self, normalized_user_name: str) -> IdentityUser | None:
        """Retrieve a user by normalized user name."""
        ...


@runtime_checkable
class IUserEmailStore(Protocol):
    """Lookup of users by email."""

    async def find_by_email(self, normalized_email: str) -> IdentityUser | None:
        """Retrieve the user with the given normalized email, if any."""
        ...


@runtime_checkable
class IUserClaimStore(Protocol):
    """Claims owned by users.

    Claims are matched on their full identity (type, value and whatever
    extension fields the store records, such as issuer), and only rows
    owned by the given user are ever touched.
    """

    async def get_claims(self, user: IdentityUser) -> list[Claim]:
        """List the claims held by a user."""
        ...

    async def add_claims(self, user: IdentityUser, claims: Iterable[Claim]) -> None:
        """Add claims to a user."""
        ...

    async def remove_claims(self, user: IdentityUser, claims: Iterable[Claim]) -> None:
        """Remove matching claims from a user; missing claims are ignored."""
        ...

    async def replace_claim(
        self, user: IdentityUser, claim: Claim, new_claim: Claim
    ) -> None:
        """Rewrite every claim of the user matching claim into new_claim."""
        ...

    async def get_users_for_claim(self, claim: Claim) -> list[IdentityUser]:
        """List all users holding a matching claim."""
        ...


@runtime_checkable
class IUserLoginStore(Protocol):
    """External login bindings."""

    async def add_login(self, user: IdentityUser, login: UserLoginInfo) -> None:
        """Bind an external login to a user."""
        ...

    async def remove_login(
        self, user: IdentityUser, login_provider: str, provider_key: str
    ) -> None:
        """Remove a login binding from a user; missing bindings are ignored."""
        ...

    async def get_logins(self, user: IdentityUser) -> list[UserLoginInfo]:
        """List the logins bound to a user."""
        ...

    async def find_by_login(
        self, login_provider: str, provider_key: str
    ) -> IdentityUser | None:
        """Retrieve the user bound to an external login."""
        ...


@runtime_checkable
class IUserAuthenticationTokenStore(Protocol):
    """Named authentication tokens per user and provider."""

    async def get_token(
        self, user: IdentityUser, login_provider: str, name: str
    ) -> str | None:
        """Return the token value, or None when unset."""
        ...

    async def set_token(
        self, user: IdentityUser, login_provider: str, name: str, value: str | None
    ) -> None:
        """Create or overwrite a token value."""
        ...

    async def remove_token(
        self, user: IdentityUser, login_provider: str, name: str
    ) -> None:
        """Delete a token; missing tokens are ignored."""
        ...


@runtime_checkable
class IUserRoleStore(Protocol):
    """Membership of users in roles, addressed by normalized role name."""

    async def add_to_role(self, user: IdentityUser, normalized_role_name: str) -> None:
        """Add a user to a role.

        Raises:
            RoleNotFoundError: If no role has the given normalized name
        """
        ...

    async def remove_from_role(
        self, user: IdentityUser, normalized_role_name: str
    ) -> None:
        """Remove a user from a role; missing memberships are ignored."""
        ...

    async def is_in_role(self, user: IdentityUser, normalized_role_name: str) -> bool:
        """Whether the user belongs to the role."""
        ...

    async def get_roles(self, user: IdentityUser) -> list[str]:
        """Names of the roles the user belongs to."""
        ...

    async def get_users_in_role(self, normalized_role_name: str) -> list[IdentityUser]:
        """Users belonging to the role."""
        ...


@runtime_checkable
class IQueryableUserStore(Protocol):
    """Filtered user queries evaluated by the database."""

    async def query(
        self, *predicates: FieldPredicate, limit: int | None = None
    ) -> list[IdentityUser]:
        """Users matching all predicates, ordered by user name."""
        ...


@runtime_checkable
class IRoleStore(Protocol):
    """Core persistence for roles."""

    async def create(self, role: IdentityRole) -> IdentityResult:
        """Persist a new role.

        Returns:
            Success, or DuplicateRoleName when the normalized name is taken
        """
        ...

    async def update(self, role: IdentityRole) -> IdentityResult:
        """Persist changes to an existing role with a concurrency check."""
        ...

    async def delete(self, role: IdentityRole) -> IdentityResult:
        """Delete a role together with its claims and user links."""
        ...

    async def find_by_id(self, role_id: str) -> IdentityRole | None:
        """Retrieve a role by id."""
        ...

    async def find_by_name(self, normalized_name: str) -> IdentityRole | None:
        """Retrieve a role by normalized name."""
        ...


@runtime_checkable
class IRoleClaimStore(Protocol):
    """Claims owned by roles."""

    async def get_claims(self, role: IdentityRole) -> list[Claim]:
        """List the claims held by a role."""
        ...

    async def add_claim(self, role: IdentityRole, claim: Claim) -> None:
        """Add a claim to a role."""
        ...

    async def remove_claim(self, role: IdentityRole, claim: Claim) -> None:
        """Remove matching claims from a role; missing claims are ignored."""
        ...


@runtime_checkable
class IQueryableRoleStore(Protocol):
    """Filtered role queries evaluated by the database."""

    async def query(
        self, *predicates: FieldPredicate, limit: int | None = None
    ) -> list[IdentityRole]:
        """Roles matching all predicates, ordered by name."""
        ...
