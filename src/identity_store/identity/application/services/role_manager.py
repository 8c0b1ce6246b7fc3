"""Role manager for the identity bounded context."""

from __future__ import annotations

from identity.application.normalizer import (
    LookupNormalizer,
    UpperInvariantLookupNormalizer,
)
from identity.application.observability import (
    DefaultRoleManagerProbe,
    RoleManagerProbe,
)
from identity.application.validators import RoleValidator
from identity.domain.aggregates import IdentityRole
from identity.domain.queries import FieldPredicate
from identity.domain.results import IdentityErrorDescriber, IdentityResult
from identity.domain.value_objects import Claim
from identity.ports.exceptions import NotSupportedError
from identity.ports.stores import IQueryableRoleStore, IRoleClaimStore, IRoleStore


class RoleManager:
    """Application service for role management.

    Role names are validated and normalized here; the store only ever sees
    normalized lookups.
    """

    def __init__(
        self,
        store: IRoleStore,
        probe: RoleManagerProbe | None = None,
        normalizer: LookupNormalizer | None = None,
        describer: IdentityErrorDescriber | None = None,
    ):
        """Initialize RoleManager with dependencies.

        Args:
            store: Role store; claims and queries are optional capabilities
            probe: Optional domain probe for observability
            normalizer: Normalizer for role names (upper-casing by default)
            describer: Source of IdentityError messages
        """
        self._store = store
        self._probe = probe or DefaultRoleManagerProbe()
        self._normalizer = normalizer or UpperInvariantLookupNormalizer()
        self._describer = describer or IdentityErrorDescriber()
        self._validator = RoleValidator(self._describer)

    async def create(self, role: IdentityRole) -> IdentityResult:
        result = self._validate(role)
        if result is not None:
            return result
        return self._observe("create", role, await self._store.create(role))

    async def update(self, role: IdentityRole) -> IdentityResult:
        result = self._validate(role)
        if result is not None:
            return result
        return self._observe("update", role, await self._store.update(role))

    async def delete(self, role: IdentityRole) -> IdentityResult:
        return self._observe("delete", role, await self._store.delete(role))

    async def find_by_id(self, role_id: str) -> IdentityRole | None:
        return await self._store.find_by_id(role_id)

    async def find_by_name(self, name: str) -> IdentityRole | None:
        """Find a role by name, normalizing it first."""
        return await self._store.find_by_name(self._normalizer.normalize_name(name) or "")

    async def role_exists(self, name: str) -> bool:
        return await self.find_by_name(name) is not None

    async def set_role_name(self, role: IdentityRole, name: str | None) -> IdentityResult:
        role.name = name
        return await self.update(role)

    async def add_claim(self, role: IdentityRole, claim: Claim) -> IdentityResult:
        store = self._require_claims()
        await store.add_claim(role, claim)
        return await self.update(role)

    async def remove_claim(self, role: IdentityRole, claim: Claim) -> IdentityResult:
        store = self._require_claims()
        await store.remove_claim(role, claim)
        return await self.update(role)

    async def get_claims(self, role: IdentityRole) -> list[Claim]:
        return await self._require_claims().get_claims(role)

    async def query(
        self, *predicates: FieldPredicate, limit: int | None = None
    ) -> list[IdentityRole]:
        """Roles matching all predicates, filtered by the database."""
        if not isinstance(self._store, IQueryableRoleStore):
            raise NotSupportedError(
                f"{type(self._store).__name__} does not implement IQueryableRoleStore"
            )
        return await self._store.query(*predicates, limit=limit)

    def _require_claims(self) -> IRoleClaimStore:
        if not isinstance(self._store, IRoleClaimStore):
            raise NotSupportedError(
                f"{type(self._store).__name__} does not implement IRoleClaimStore"
            )
        return self._store

    def _validate(self, role: IdentityRole) -> IdentityResult | None:
        role.normalized_name = self._normalizer.normalize_name(role.name)
        errors = self._validator.validate(role)
        if not errors:
            return None
        self._probe.validation_failed(role.name, [e.code for e in errors])
        return IdentityResult.failed(*errors)

    def _observe(
        self, operation: str, role: IdentityRole, result: IdentityResult
    ) -> IdentityResult:
        if not result.succeeded:
            self._probe.operation_failed(operation, role.id, result.error_codes)
        return result
