"""User manager for the identity bounded context.

The manager is the front door for user operations: it validates and
normalizes users, rotates stamps, and reaches the optional store
capabilities only when a caller uses them.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TypeVar

from identity.application.normalizer import (
    LookupNormalizer,
    UpperInvariantLookupNormalizer,
)
from identity.application.observability import (
    DefaultUserManagerProbe,
    UserManagerProbe,
)
from identity.application.validators import UserValidator
from identity.domain.aggregates import IdentityUser
from identity.domain.queries import FieldPredicate
from identity.domain.results import (
    IdentityError,
    IdentityErrorDescriber,
    IdentityResult,
)
from identity.domain.value_objects import Claim, UserLoginInfo, new_stamp
from identity.ports.exceptions import NotSupportedError
from identity.ports.stores import (
    IQueryableUserStore,
    IUserAuthenticationTokenStore,
    IUserClaimStore,
    IUserEmailStore,
    IUserLoginStore,
    IUserRoleStore,
    IUserStore,
)
from infrastructure.settings import IdentitySettings, get_identity_settings

_Capability = TypeVar("_Capability")


class UserManager:
    """Application service for user management.

    Every state-changing call finishes with update(), which persists the
    user and rotates its concurrency stamp. Changes to credentials, claims,
    logins or roles also rotate the security stamp.
    """

    def __init__(
        self,
        store: IUserStore,
        probe: UserManagerProbe | None = None,
        normalizer: LookupNormalizer | None = None,
        settings: IdentitySettings | None = None,
        describer: IdentityErrorDescriber | None = None,
    ):
        """Initialize UserManager with dependencies.

        Args:
            store: User store; optional capabilities are detected at call time
            probe: Optional domain probe for observability
            normalizer: Normalizer for names and emails (upper-casing by default)
            settings: Identity policy settings (loaded from the environment
                by default)
            describer: Source of IdentityError messages
        """
        self._store = store
        self._probe = probe or DefaultUserManagerProbe()
        self._normalizer = normalizer or UpperInvariantLookupNormalizer()
        self._settings = settings or get_identity_settings()
        self._describer = describer or IdentityErrorDescriber()
        self._validator = UserValidator(self._settings, self._describer)

    # -- lifecycle ------------------------------------------------------------

    async def create(self, user: IdentityUser) -> IdentityResult:
        """Validate, stamp and persist a new user."""
        user.security_stamp = new_stamp()
        user.concurrency_stamp = new_stamp()
        self._update_normalized(user)

        errors = await self._validate(user)
        if errors:
            self._probe.validation_failed(user.user_name, [e.code for e in errors])
            return IdentityResult.failed(*errors)

        return self._observe("create", user, await self._store.create(user))

    async def update(self, user: IdentityUser) -> IdentityResult:
        """Validate, normalize and persist changes to a user."""
        self._update_normalized(user)

        errors = await self._validate(user)
        if errors:
            self._probe.validation_failed(user.user_name, [e.code for e in errors])
            return IdentityResult.failed(*errors)

        return self._observe("update", user, await self._store.update(user))

    async def delete(self, user: IdentityUser) -> IdentityResult:
        return self._observe("delete", user, await self._store.delete(user))

    # -- lookups --------------------------------------------------------------

    async def find_by_id(self, user_id: str) -> IdentityUser | None:
        return await self._store.find_by_id(user_id)

    async def find_by_name(self, user_name: str) -> IdentityUser | None:
        """Find a user by name, normalizing it first."""
        return await self._store.find_by_name(self._normalize_name(user_name))

    async def find_by_email(self, email: str) -> IdentityUser | None:
        """Find a user by email, normalizing it first."""
        store = self._require(IUserEmailStore)
        return await store.find_by_email(self._normalizer.normalize_email(email) or "")

    def get_user_id(self, user: IdentityUser) -> str | None:
        return user.id

    def get_user_name(self, user: IdentityUser) -> str | None:
        return user.user_name

    # -- profile --------------------------------------------------------------

    async def set_user_name(
        self, user: IdentityUser, user_name: str | None
    ) -> IdentityResult:
        user.user_name = user_name
        self._rotate_security_stamp(user)
        return await self.update(user)

    async def set_email(self, user: IdentityUser, email: str | None) -> IdentityResult:
        """Change the email; the new address starts unconfirmed."""
        user.email = email
        user.email_confirmed = False
        self._rotate_security_stamp(user)
        return await self.update(user)

    async def set_phone_number(
        self, user: IdentityUser, phone_number: str | None
    ) -> IdentityResult:
        """Change the phone number; the new number starts unconfirmed."""
        user.phone_number = phone_number
        user.phone_number_confirmed = False
        self._rotate_security_stamp(user)
        return await self.update(user)

    async def set_password_hash(
        self, user: IdentityUser, password_hash: str | None
    ) -> IdentityResult:
        user.password_hash = password_hash
        self._rotate_security_stamp(user)
        return await self.update(user)

    def has_password(self, user: IdentityUser) -> bool:
        return user.password_hash is not None

    async def set_lockout_enabled(
        self, user: IdentityUser, enabled: bool
    ) -> IdentityResult:
        user.lockout_enabled = enabled
        return await self.update(user)

    async def set_lockout_end_date(
        self, user: IdentityUser, lockout_end: datetime | None
    ) -> IdentityResult:
        """Lock the user out until lockout_end; None lifts the lockout.

        Fails with UserLockoutNotEnabled when lockout is disabled for the user.
        """
        if not user.lockout_enabled:
            return self._fail(
                "set_lockout_end_date", user, self._describer.user_lockout_not_enabled()
            )
        user.lockout_end = lockout_end
        return await self.update(user)

    def is_locked_out(self, user: IdentityUser) -> bool:
        return user.is_locked_out()

    async def update_security_stamp(self, user: IdentityUser) -> IdentityResult:
        self._rotate_security_stamp(user)
        return await self.update(user)

    # -- claims ---------------------------------------------------------------

    async def add_claim(self, user: IdentityUser, claim: Claim) -> IdentityResult:
        return await self.add_claims(user, [claim])

    async def add_claims(
        self, user: IdentityUser, claims: Iterable[Claim]
    ) -> IdentityResult:
        store = self._require(IUserClaimStore)
        await store.add_claims(user, list(claims))
        self._rotate_security_stamp(user)
        return await self.update(user)

    async def remove_claim(self, user: IdentityUser, claim: Claim) -> IdentityResult:
        return await self.remove_claims(user, [claim])

    async def remove_claims(
        self, user: IdentityUser, claims: Iterable[Claim]
    ) -> IdentityResult:
        store = self._require(IUserClaimStore)
        await store.remove_claims(user, list(claims))
        self._rotate_security_stamp(user)
        return await self.update(user)

    async def replace_claim(
        self, user: IdentityUser, claim: Claim, new_claim: Claim
    ) -> IdentityResult:
        store = self._require(IUserClaimStore)
        await store.replace_claim(user, claim, new_claim)
        self._rotate_security_stamp(user)
        return await self.update(user)

    async def get_claims(self, user: IdentityUser) -> list[Claim]:
        return await self._require(IUserClaimStore).get_claims(user)

    async def get_users_for_claim(self, claim: Claim) -> list[IdentityUser]:
        return await self._require(IUserClaimStore).get_users_for_claim(claim)

    # -- logins ---------------------------------------------------------------

    async def add_login(
        self, user: IdentityUser, login: UserLoginInfo
    ) -> IdentityResult:
        """Bind an external login unless any user already holds it."""
        store = self._require(IUserLoginStore)

        existing = await store.find_by_login(login.login_provider, login.provider_key)
        if existing is not None:
            return self._fail(
                "add_login", user, self._describer.login_already_associated()
            )

        await store.add_login(user, login)
        return await self.update(user)

    async def remove_login(
        self, user: IdentityUser, login_provider: str, provider_key: str
    ) -> IdentityResult:
        store = self._require(IUserLoginStore)
        await store.remove_login(user, login_provider, provider_key)
        self._rotate_security_stamp(user)
        return await self.update(user)

    async def get_logins(self, user: IdentityUser) -> list[UserLoginInfo]:
        return await self._require(IUserLoginStore).get_logins(user)

    async def find_by_login(
        self, login_provider: str, provider_key: str
    ) -> IdentityUser | None:
        return await self._require(IUserLoginStore).find_by_login(
            login_provider, provider_key
        )

    # -- tokens ---------------------------------------------------------------

    async def get_authentication_token(
        self, user: IdentityUser, login_provider: str, name: str
    ) -> str | None:
        store = self._require(IUserAuthenticationTokenStore)
        return await store.get_token(user, login_provider, name)

    async def set_authentication_token(
        self, user: IdentityUser, login_provider: str, name: str, value: str | None
    ) -> IdentityResult:
        store = self._require(IUserAuthenticationTokenStore)
        await store.set_token(user, login_provider, name, value)
        return await self.update(user)

    async def remove_authentication_token(
        self, user: IdentityUser, login_provider: str, name: str
    ) -> IdentityResult:
        store = self._require(IUserAuthenticationTokenStore)
        await store.remove_token(user, login_provider, name)
        return await self.update(user)

    # -- roles ----------------------------------------------------------------

    async def add_to_role(self, user: IdentityUser, role: str) -> IdentityResult:
        """Add the user to a role.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        return await self.add_to_roles(user, [role])

    async def add_to_roles(
        self, user: IdentityUser, roles: Iterable[str]
    ) -> IdentityResult:
        """Add the user to each role, stopping at the first existing membership."""
        store = self._require(IUserRoleStore)

        for role in dict.fromkeys(roles):
            normalized = self._normalize_name(role)
            if await store.is_in_role(user, normalized):
                return self._fail(
                    "add_to_role", user, self._describer.user_already_in_role(role)
                )
            await store.add_to_role(user, normalized)

        self._rotate_security_stamp(user)
        return await self.update(user)

    async def remove_from_role(self, user: IdentityUser, role: str) -> IdentityResult:
        store = self._require(IUserRoleStore)
        normalized = self._normalize_name(role)

        if not await store.is_in_role(user, normalized):
            return self._fail(
                "remove_from_role", user, self._describer.user_not_in_role(role)
            )

        await store.remove_from_role(user, normalized)
        self._rotate_security_stamp(user)
        return await self.update(user)

    async def is_in_role(self, user: IdentityUser, role: str) -> bool:
        store = self._require(IUserRoleStore)
        return await store.is_in_role(user, self._normalize_name(role))

    async def get_roles(self, user: IdentityUser) -> list[str]:
        return await self._require(IUserRoleStore).get_roles(user)

    async def get_users_in_role(self, role: str) -> list[IdentityUser]:
        store = self._require(IUserRoleStore)
        return await store.get_users_in_role(self._normalize_name(role))

    # -- queries --------------------------------------------------------------

    async def query(
        self, *predicates: FieldPredicate, limit: int | None = None
    ) -> list[IdentityUser]:
        """Users matching all predicates, filtered by the database."""
        store = self._require(IQueryableUserStore)
        return await store.query(*predicates, limit=limit)

    # -- helpers --------------------------------------------------------------

    def _require(self, capability: type[_Capability]) -> _Capability:
        if not isinstance(self._store, capability):
            raise NotSupportedError(
                f"{type(self._store).__name__} does not implement {capability.__name__}"
            )
        return self._store

    def _normalize_name(self, name: str) -> str:
        return self._normalizer.normalize_name(name) or ""

    def _update_normalized(self, user: IdentityUser) -> None:
        user.normalized_user_name = self._normalizer.normalize_name(user.user_name)
        user.normalized_email = self._normalizer.normalize_email(user.email)

    def _rotate_security_stamp(self, user: IdentityUser) -> None:
        user.security_stamp = new_stamp()
        self._probe.security_stamp_rotated(user.id)

    async def _validate(self, user: IdentityUser) -> list[IdentityError]:
        errors = self._validator.validate(user)
        if self._settings.require_unique_email:
            errors.extend(await self._validate_email(user))
        return errors

    async def _validate_email(self, user: IdentityUser) -> list[IdentityError]:
        if user.normalized_email is None:
            return []
        owner = await self._require(IUserEmailStore).find_by_email(
            user.normalized_email
        )
        if owner is not None and owner.id != user.id:
            return [self._describer.duplicate_email(user.email)]
        return []

    def _fail(
        self, operation: str, user: IdentityUser, error: IdentityError
    ) -> IdentityResult:
        return self._observe(operation, user, IdentityResult.failed(error))

    def _observe(
        self, operation: str, user: IdentityUser, result: IdentityResult
    ) -> IdentityResult:
        if not result.succeeded:
            self._probe.operation_failed(operation, user.id, result.error_codes)
        return result
