"""SQLAlchemy implementation of the user store capabilities.

One store class serves every user capability (claims, logins, tokens, roles,
queries). The child row classes are class attributes, and the create_* hooks
build their rows. A store whose rows carry extra columns subclasses
UserStore, points the attributes at its own row classes and overrides the
hooks to fill those columns.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from identity.domain.aggregates import IdentityRole, IdentityUser
from identity.domain.queries import FieldPredicate
from identity.domain.results import IdentityErrorDescriber, IdentityResult
from identity.domain.value_objects import (
    Claim,
    UserLoginInfo,
    generate_id,
    new_stamp,
)
from identity.infrastructure.mappers import role_from_model, user_from_model, user_values
from identity.infrastructure.models import (
    RoleModel,
    UserClaimMixin,
    UserClaimModel,
    UserLoginMixin,
    UserLoginModel,
    UserModel,
    UserRoleMixin,
    UserRoleModel,
    UserTokenMixin,
    UserTokenModel,
)
from identity.infrastructure.observability import (
    DefaultUserStoreProbe,
    UserStoreProbe,
)
from identity.infrastructure.queries import user_conditions
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
from infrastructure.database import SessionScope, SessionSource
from infrastructure.observability import ConnectionProbe


class StaleStampError(Exception):
    """Raised inside a transaction to roll it back on a concurrency conflict."""


class UserStore(
    IUserStore,
    IUserEmailStore,
    IUserClaimStore,
    IUserLoginStore,
    IUserAuthenticationTokenStore,
    IUserRoleStore,
    IQueryableUserStore,
):
    """Relational store for users and everything they own.

    Every public operation runs in its own transaction (see SessionScope),
    so a failure or cancellation never leaves part of an operation behind.
    """

    user_claim_model: type[UserClaimMixin] = UserClaimModel
    user_login_model: type[UserLoginMixin] = UserLoginModel
    user_token_model: type[UserTokenMixin] = UserTokenModel
    user_role_model: type[UserRoleMixin] = UserRoleModel

    def __init__(
        self,
        session: SessionSource,
        probe: UserStoreProbe | None = None,
        describer: IdentityErrorDescriber | None = None,
        connection_probe: ConnectionProbe | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            session: An async_sessionmaker for per-operation sessions, or a
                caller-owned AsyncSession to join as a unit of work
            probe: Optional domain probe for observability
            describer: Optional source of IdentityError messages
            connection_probe: Optional probe for transaction observability
        """
        self._scope = SessionScope(session, probe=connection_probe)
        self._probe = probe or DefaultUserStoreProbe()
        self._describer = describer or IdentityErrorDescriber()

    # -- customization hooks -------------------------------------------------

    def create_user_claim(self, user: IdentityUser, claim: Claim) -> UserClaimMixin:
        """Build the claim row persisted for a user."""
        row = self.user_claim_model(user_id=user.id)
        row.initialize_from_claim(claim)
        return row

    def create_user_role(self, user: IdentityUser, role: IdentityRole) -> UserRoleMixin:
        """Build the membership row linking a user to a role."""
        return self.user_role_model(user_id=user.id, role_id=role.id)

    def create_user_login(
        self, user: IdentityUser, login: UserLoginInfo
    ) -> UserLoginMixin:
        """Build the login row binding an external account to a user."""
        return self.user_login_model(
            user_id=user.id,
            login_provider=login.login_provider,
            provider_key=login.provider_key,
            provider_display_name=login.provider_display_name,
        )

    def create_user_token(
        self, user: IdentityUser, login_provider: str, name: str, value: str | None
    ) -> UserTokenMixin:
        """Build a token row for a user."""
        return self.user_token_model(
            user_id=user.id,
            login_provider=login_provider,
            name=name,
            value=value,
        )

    # -- IUserStore -----------------------------------------------------------

    async def create(self, user: IdentityUser) -> IdentityResult:
        """Persist a new user, assigning an id when unset."""
        if user.id is None:
            user.id = generate_id()

        try:
            async with self._scope.transaction("create_user") as session:
                if await self._name_taken(session, user.normalized_user_name, user.id):
                    self._probe.duplicate_user_name(user.user_name)
                    return IdentityResult.failed(
                        self._describer.duplicate_user_name(user.user_name)
                    )

                session.add(
                    UserModel(
                        id=user.id,
                        concurrency_stamp=user.concurrency_stamp,
                        **user_values(user),
                    )
                )
                # Flush to surface integrity errors inside the transaction
                await session.flush()
        except IntegrityError as e:
            return self._integrity_failure("create", user, e)

        self._probe.user_created(user.id, user.user_name)
        return IdentityResult.success()

    async def update(self, user: IdentityUser) -> IdentityResult:
        """Persist changes when the concurrency stamp still matches."""
        user_id = self._require_id(user)
        stamp = new_stamp()

        try:
            async with self._scope.transaction("update_user") as session:
                if await self._name_taken(session, user.normalized_user_name, user_id):
                    self._probe.duplicate_user_name(user.user_name)
                    return IdentityResult.failed(
                        self._describer.duplicate_user_name(user.user_name)
                    )

                stmt = (
                    update(UserModel)
                    .where(
                        UserModel.id == user_id,
                        UserModel.concurrency_stamp == user.concurrency_stamp,
                    )
                    .values(concurrency_stamp=stamp, **user_values(user))
                )
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    self._probe.concurrency_failure(user_id)
                    return IdentityResult.failed(
                        self._describer.concurrency_failure()
                    )
        except IntegrityError as e:
            return self._integrity_failure("update", user, e)

        user.concurrency_stamp = stamp
        self._probe.user_updated(user_id)
        return IdentityResult.success()

    async def delete(self, user: IdentityUser) -> IdentityResult:
        """Delete the user and every row it owns."""
        user_id = self._require_id(user)

        try:
            async with self._scope.transaction("delete_user") as session:
                for model in (
                    self.user_claim_model,
                    self.user_login_model,
                    self.user_token_model,
                    self.user_role_model,
                ):
                    await session.execute(delete(model).where(model.user_id == user_id))

                result = await session.execute(
                    delete(UserModel).where(
                        UserModel.id == user_id,
                        UserModel.concurrency_stamp == user.concurrency_stamp,
                    )
                )
                if result.rowcount == 0:
                    # Roll back the child deletes as well
                    raise StaleStampError(user_id)
        except StaleStampError:
            self._probe.concurrency_failure(user_id)
            return IdentityResult.failed(self._describer.concurrency_failure())
        except IntegrityError as e:
            return self._integrity_failure("delete", user, e)

        self._probe.user_deleted(user_id)
        return IdentityResult.success()

    async def find_by_id(self, user_id: str) -> IdentityUser | None:
        """Retrieve a user by id."""
        return await self._find_one(
            "find_user_by_id", "id", user_id, UserModel.id == user_id
        )

    async def find_by_name(self, normalized_user_name: str) -> IdentityUser | None:
        """Retrieve a user by normalized user name."""
        return await self._find_one(
            "find_user_by_name",
            "normalized_user_name",
            normalized_user_name,
            UserModel.normalized_user_name == normalized_user_name,
        )

    # -- IUserEmailStore ------------------------------------------------------

    async def find_by_email(self, normalized_email: str) -> IdentityUser | None:
        """Retrieve the first user with the given normalized email."""
        return await self._find_one(
            "find_user_by_email",
            "normalized_email",
            normalized_email,
            UserModel.normalized_email == normalized_email,
        )

    # -- IUserClaimStore ------------------------------------------------------

    async def get_claims(self, user: IdentityUser) -> list[Claim]:
        """List the claims held by a user, in insertion order."""
        user_id = self._require_id(user)
        model = self.user_claim_model

        async with self._scope.transaction("get_user_claims") as session:
            stmt = select(model).where(model.user_id == user_id).order_by(model.id)
            result = await session.execute(stmt)
            return [row.to_claim() for row in result.scalars().all()]

    async def add_claims(self, user: IdentityUser, claims: Iterable[Claim]) -> None:
        """Add claims to a user in one transaction."""
        self._require_id(user)
        rows = [self.create_user_claim(user, claim) for claim in claims]

        async with self._scope.transaction("add_user_claims") as session:
            session.add_all(rows)

        self._probe.claims_added(user.id, len(rows))

    async def remove_claims(self, user: IdentityUser, claims: Iterable[Claim]) -> None:
        """Remove every claim row of this user matching one of the claims."""
        user_id = self._require_id(user)
        model = self.user_claim_model
        removed = 0

        async with self._scope.transaction("remove_user_claims") as session:
            for claim in claims:
                result = await session.execute(
                    delete(model).where(model.user_id == user_id, *model.matches(claim))
                )
                removed += result.rowcount

        self._probe.claims_removed(user_id, removed)

    async def replace_claim(
        self, user: IdentityUser, claim: Claim, new_claim: Claim
    ) -> None:
        """Rewrite this user's rows matching claim so they hold new_claim."""
        user_id = self._require_id(user)
        model = self.user_claim_model

        async with self._scope.transaction("replace_user_claim") as session:
            stmt = select(model).where(model.user_id == user_id, *model.matches(claim))
            result = await session.execute(stmt)
            rows = result.scalars().all()
            for row in rows:
                row.initialize_from_claim(new_claim)

        self._probe.claim_replaced(user_id, len(rows))

    async def get_users_for_claim(self, claim: Claim) -> list[IdentityUser]:
        """List all users holding a matching claim."""
        model = self.user_claim_model

        async with self._scope.transaction("get_users_for_claim") as session:
            stmt = (
                select(UserModel)
                .where(
                    exists().where(model.user_id == UserModel.id, *model.matches(claim))
                )
                .order_by(UserModel.user_name)
            )
            result = await session.execute(stmt)
            return [user_from_model(row) for row in result.scalars().all()]

    # -- IUserLoginStore ------------------------------------------------------

    async def add_login(self, user: IdentityUser, login: UserLoginInfo) -> None:
        """Bind an external login to a user.

        Raises:
            IntegrityError: If the login is already bound to any user
        """
        self._require_id(user)
        row = self.create_user_login(user, login)

        async with self._scope.transaction("add_user_login") as session:
            session.add(row)

        self._probe.login_added(user.id, login.login_provider)

    async def remove_login(
        self, user: IdentityUser, login_provider: str, provider_key: str
    ) -> None:
        """Remove a login binding; a missing binding is a no-op."""
        user_id = self._require_id(user)
        model = self.user_login_model

        async with self._scope.transaction("remove_user_login") as session:
            result = await session.execute(
                delete(model).where(
                    model.user_id == user_id,
                    model.login_provider == login_provider,
                    model.provider_key == provider_key,
                )
            )

        self._probe.login_removed(user_id, login_provider, result.rowcount > 0)

    async def get_logins(self, user: IdentityUser) -> list[UserLoginInfo]:
        """List the logins bound to a user."""
        user_id = self._require_id(user)
        model = self.user_login_model

        async with self._scope.transaction("get_user_logins") as session:
            stmt = (
                select(model)
                .where(model.user_id == user_id)
                .order_by(model.login_provider, model.provider_key)
            )
            result = await session.execute(stmt)
            return [row.to_login_info() for row in result.scalars().all()]

    async def find_by_login(
        self, login_provider: str, provider_key: str
    ) -> IdentityUser | None:
        """Retrieve the user bound to an external login."""
        model = self.user_login_model

        async with self._scope.transaction("find_user_by_login") as session:
            stmt = (
                select(UserModel)
                .join(model, model.user_id == UserModel.id)
                .where(
                    model.login_provider == login_provider,
                    model.provider_key == provider_key,
                )
            )
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()
            user = user_from_model(row) if row is not None else None

        if user is None:
            self._probe.user_not_found("login", f"{login_provider}:{provider_key}")
            return None

        self._probe.user_retrieved(user.id)
        return user

    # -- IUserAuthenticationTokenStore ---------------------------------------

    async def get_token(
        self, user: IdentityUser, login_provider: str, name: str
    ) -> str | None:
        """Return the token value, or None when the token does not exist."""
        user_id = self._require_id(user)
        model = self.user_token_model

        async with self._scope.transaction("get_user_token") as session:
            stmt = select(model.value).where(
                model.user_id == user_id,
                model.login_provider == login_provider,
                model.name == name,
            )
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def set_token(
        self, user: IdentityUser, login_provider: str, name: str, value: str | None
    ) -> None:
        """Create the token or overwrite its value."""
        user_id = self._require_id(user)
        model = self.user_token_model

        async with self._scope.transaction("set_user_token") as session:
            stmt = select(model).where(
                model.user_id == user_id,
                model.login_provider == login_provider,
                model.name == name,
            )
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()

            if row is None:
                session.add(self.create_user_token(user, login_provider, name, value))
            else:
                row.value = value

        self._probe.token_set(user_id, login_provider, name)

    async def remove_token(
        self, user: IdentityUser, login_provider: str, name: str
    ) -> None:
        """Delete a token; a missing token is a no-op."""
        user_id = self._require_id(user)
        model = self.user_token_model

        async with self._scope.transaction("remove_user_token") as session:
            result = await session.execute(
                delete(model).where(
                    model.user_id == user_id,
                    model.login_provider == login_provider,
                    model.name == name,
                )
            )

        self._probe.token_removed(user_id, login_provider, name, result.rowcount > 0)

    # -- IUserRoleStore -------------------------------------------------------

    async def add_to_role(self, user: IdentityUser, normalized_role_name: str) -> None:
        """Add a user to the role with the given normalized name.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        self._require_id(user)

        async with self._scope.transaction("add_user_to_role") as session:
            role = await self._find_role(session, normalized_role_name)
            if role is None:
                raise RoleNotFoundError(normalized_role_name)
            session.add(self.create_user_role(user, role_from_model(role)))

        self._probe.added_to_role(user.id, normalized_role_name)

    async def remove_from_role(
        self, user: IdentityUser, normalized_role_name: str
    ) -> None:
        """Remove a user from a role; a missing role or membership is a no-op."""
        user_id = self._require_id(user)
        model = self.user_role_model
        removed = False

        async with self._scope.transaction("remove_user_from_role") as session:
            role = await self._find_role(session, normalized_role_name)
            if role is not None:
                result = await session.execute(
                    delete(model).where(
                        model.user_id == user_id, model.role_id == role.id
                    )
                )
                removed = result.rowcount > 0

        self._probe.removed_from_role(user_id, normalized_role_name, removed)

    async def is_in_role(self, user: IdentityUser, normalized_role_name: str) -> bool:
        """Whether the user belongs to the role."""
        user_id = self._require_id(user)
        model = self.user_role_model

        async with self._scope.transaction("is_user_in_role") as session:
            stmt = select(
                exists()
                .where(model.user_id == user_id)
                .where(model.role_id == RoleModel.id)
                .where(RoleModel.normalized_name == normalized_role_name)
            )
            result = await session.execute(stmt)
            return bool(result.scalar())

    async def get_roles(self, user: IdentityUser) -> list[str]:
        """Names of the roles the user belongs to, sorted."""
        user_id = self._require_id(user)
        model = self.user_role_model

        async with self._scope.transaction("get_user_roles") as session:
            stmt = (
                select(RoleModel.name)
                .join(model, model.role_id == RoleModel.id)
                .where(model.user_id == user_id)
                .order_by(RoleModel.name)
            )
            result = await session.execute(stmt)
            return [name for name in result.scalars().all() if name is not None]

    async def get_users_in_role(self, normalized_role_name: str) -> list[IdentityUser]:
        """Users belonging to the role; empty when the role does not exist."""
        model = self.user_role_model

        async with self._scope.transaction("get_users_in_role") as session:
            stmt = (
                select(UserModel)
                .join(model, model.user_id == UserModel.id)
                .join(RoleModel, RoleModel.id == model.role_id)
                .where(RoleModel.normalized_name == normalized_role_name)
                .order_by(UserModel.user_name)
            )
            result = await session.execute(stmt)
            return [user_from_model(row) for row in result.scalars().all()]

    # -- IQueryableUserStore --------------------------------------------------

    async def query(
        self, *predicates: FieldPredicate, limit: int | None = None
    ) -> list[IdentityUser]:
        """Users matching all predicates, ordered by user name."""
        stmt = (
            select(UserModel)
            .where(*user_conditions(*predicates))
            .order_by(UserModel.user_name)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._scope.transaction("query_users") as session:
            result = await session.execute(stmt)
            users = [user_from_model(row) for row in result.scalars().all()]

        self._probe.users_queried(len(predicates), len(users))
        return users

    # -- helpers --------------------------------------------------------------

    @staticmethod
    def _require_id(user: IdentityUser) -> str:
        if user.id is None:
            raise ValueError(f"{user} has not been created")
        return user.id

    async def _find_one(
        self, operation: str, lookup: str, value: str, condition
    ) -> IdentityUser | None:
        async with self._scope.transaction(operation) as session:
            stmt = select(UserModel).where(condition).order_by(UserModel.id).limit(1)
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()
            user = user_from_model(row) if row is not None else None

        if user is None:
            self._probe.user_not_found(lookup, value)
            return None

        self._probe.user_retrieved(user.id)
        return user

    @staticmethod
    async def _name_taken(
        session: AsyncSession, normalized_user_name: str | None, user_id: str
    ) -> bool:
        if normalized_user_name is None:
            return False
        stmt = select(
            exists().where(
                UserModel.normalized_user_name == normalized_user_name,
                UserModel.id != user_id,
            )
        )
        result = await session.execute(stmt)
        return bool(result.scalar())

    @staticmethod
    async def _find_role(
        session: AsyncSession, normalized_role_name: str
    ) -> RoleModel | None:
        stmt = select(RoleModel).where(RoleModel.normalized_name == normalized_role_name)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    def _integrity_failure(
        self, operation: str, user: IdentityUser, error: IntegrityError
    ) -> IdentityResult:
        # Lost the race against a concurrent writer; the unique index decided
        if "normalized_user_name" in str(error.orig):
            self._probe.duplicate_user_name(user.user_name)
            return IdentityResult.failed(
                self._describer.duplicate_user_name(user.user_name)
            )
        self._probe.write_failed(operation, user.id, str(error.orig))
        return IdentityResult.failed(self._describer.default_error())
