"""SQLAlchemy implementation of the role store capabilities."""

from __future__ import annotations

from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from identity.domain.aggregates import IdentityRole
from identity.domain.queries import FieldPredicate
from identity.domain.results import IdentityErrorDescriber, IdentityResult
from identity.domain.value_objects import Claim, generate_id, new_stamp
from identity.infrastructure.mappers import role_from_model, role_values
from identity.infrastructure.models import (
    RoleClaimMixin,
    RoleClaimModel,
    RoleModel,
    UserRoleMixin,
    UserRoleModel,
)
from identity.infrastructure.observability import (
    DefaultRoleStoreProbe,
    RoleStoreProbe,
)
from identity.infrastructure.queries import role_conditions
from identity.infrastructure.user_store import StaleStampError
from identity.ports.stores import IQueryableRoleStore, IRoleClaimStore, IRoleStore
from infrastructure.database import SessionScope, SessionSource
from infrastructure.observability import ConnectionProbe


class RoleStore(IRoleStore, IRoleClaimStore, IQueryableRoleStore):
    """Relational store for roles and their claims.

    Like UserStore, the claim and membership row classes are class
    attributes and create_role_claim builds claim rows, so a subclass can
    persist extra claim columns.
    """

    role_claim_model: type[RoleClaimMixin] = RoleClaimModel
    user_role_model: type[UserRoleMixin] = UserRoleModel

    def __init__(
        self,
        session: SessionSource,
        probe: RoleStoreProbe | None = None,
        describer: IdentityErrorDescriber | None = None,
        connection_probe: ConnectionProbe | None = None,
    ) -> None:
        self._scope = SessionScope(session, probe=connection_probe)
        self._probe = probe or DefaultRoleStoreProbe()
        self._describer = describer or IdentityErrorDescriber()

    def create_role_claim(self, role: IdentityRole, claim: Claim) -> RoleClaimMixin:
        """Build the claim row persisted for a role."""
        row = self.role_claim_model(role_id=role.id)
        row.initialize_from_claim(claim)
        return row

    async def create(self, role: IdentityRole) -> IdentityResult:
        """Persist a new role, assigning an id when unset."""
        if role.id is None:
            role.id = generate_id()

        try:
            async with self._scope.transaction("create_role") as session:
                if await self._name_taken(session, role.normalized_name, role.id):
                    self._probe.duplicate_role_name(role.name)
                    return IdentityResult.failed(
                        self._describer.duplicate_role_name(role.name)
                    )

                session.add(
                    RoleModel(
                        id=role.id,
                        concurrency_stamp=role.concurrency_stamp,
                        **role_values(role),
                    )
                )
                await session.flush()
        except IntegrityError as e:
            return self._integrity_failure("create", role, e)

        self._probe.role_created(role.id, role.name)
        return IdentityResult.success()

    async def update(self, role: IdentityRole) -> IdentityResult:
        """Persist changes when the concurrency stamp still matches."""
        role_id = self._require_id(role)
        stamp = new_stamp()

        try:
            async with self._scope.transaction("update_role") as session:
                if await self._name_taken(session, role.normalized_name, role_id):
                    self._probe.duplicate_role_name(role.name)
                    return IdentityResult.failed(
                        self._describer.duplicate_role_name(role.name)
                    )

                result = await session.execute(
                    update(RoleModel)
                    .where(
                        RoleModel.id == role_id,
                        RoleModel.concurrency_stamp == role.concurrency_stamp,
                    )
                    .values(concurrency_stamp=stamp, **role_values(role))
                )
                if result.rowcount == 0:
                    self._probe.concurrency_failure(role_id)
                    return IdentityResult.failed(
                        self._describer.concurrency_failure()
                    )
        except IntegrityError as e:
            return self._integrity_failure("update", role, e)

        role.concurrency_stamp = stamp
        self._probe.role_updated(role_id)
        return IdentityResult.success()

    async def delete(self, role: IdentityRole) -> IdentityResult:
        """Delete the role, its claims and its memberships."""
        role_id = self._require_id(role)

        try:
            async with self._scope.transaction("delete_role") as session:
                for model in (self.role_claim_model, self.user_role_model):
                    await session.execute(delete(model).where(model.role_id == role_id))

                result = await session.execute(
                    delete(RoleModel).where(
                        RoleModel.id == role_id,
                        RoleModel.concurrency_stamp == role.concurrency_stamp,
                    )
                )
                if result.rowcount == 0:
                    raise StaleStampError(role_id)
        except StaleStampError:
            self._probe.concurrency_failure(role_id)
            return IdentityResult.failed(self._describer.concurrency_failure())
        except IntegrityError as e:
            return self._integrity_failure("delete", role, e)

        self._probe.role_deleted(role_id)
        return IdentityResult.success()

    async def find_by_id(self, role_id: str) -> IdentityRole | None:
        return await self._find_one("find_role_by_id", "id", role_id, RoleModel.id == role_id)

    async def find_by_name(self, normalized_name: str) -> IdentityRole | None:
        return await self._find_one(
            "find_role_by_name",
            "normalized_name",
            normalized_name,
            RoleModel.normalized_name == normalized_name,
        )

    async def get_claims(self, role: IdentityRole) -> list[Claim]:
        """List the claims held by a role, in insertion order."""
        role_id = self._require_id(role)
        model = self.role_claim_model

        async with self._scope.transaction("get_role_claims") as session:
            stmt = select(model).where(model.role_id == role_id).order_by(model.id)
            result = await session.execute(stmt)
            return [row.to_claim() for row in result.scalars().all()]

    async def add_claim(self, role: IdentityRole, claim: Claim) -> None:
        self._require_id(role)
        row = self.create_role_claim(role, claim)

        async with self._scope.transaction("add_role_claim") as session:
            session.add(row)

        self._probe.claim_added(role.id, claim.type)

    async def remove_claim(self, role: IdentityRole, claim: Claim) -> None:
        role_id = self._require_id(role)
        model = self.role_claim_model

        async with self._scope.transaction("remove_role_claim") as session:
            result = await session.execute(
                delete(model).where(model.role_id == role_id, *model.matches(claim))
            )

        self._probe.claims_removed(role_id, result.rowcount)

    async def query(
        self, *predicates: FieldPredicate, limit: int | None = None
    ) -> list[IdentityRole]:
        """Roles matching all predicates, ordered by name."""
        stmt = (
            select(RoleModel)
            .where(*role_conditions(*predicates))
            .order_by(RoleModel.name)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._scope.transaction("query_roles") as session:
            result = await session.execute(stmt)
            roles = [role_from_model(row) for row in result.scalars().all()]

        self._probe.roles_queried(len(predicates), len(roles))
        return roles

    @staticmethod
    def _require_id(role: IdentityRole) -> str:
        if role.id is None:
            raise ValueError(f"{role} has not been created")
        return role.id

    async def _find_one(
        self, operation: str, lookup: str, value: str, condition
    ) -> IdentityRole | None:
        async with self._scope.transaction(operation) as session:
            result = await session.execute(select(RoleModel).where(condition))
            row = result.scalar_one_or_none()
            role = role_from_model(row) if row is not None else None

        if role is None:
            self._probe.role_not_found(lookup, value)
        return role

    @staticmethod
    async def _name_taken(
        session: AsyncSession, normalized_name: str | None, role_id: str
    ) -> bool:
        if normalized_name is None:
            return False
        stmt = select(
            exists().where(
                RoleModel.normalized_name == normalized_name,
                RoleModel.id != role_id,
            )
        )
        result = await session.execute(stmt)
        return bool(result.scalar())

    def _integrity_failure(
        self, operation: str, role: IdentityRole, error: IntegrityError
    ) -> IdentityResult:
        if "normalized_name" in str(error.orig):
            self._probe.duplicate_role_name(role.name)
            return IdentityResult.failed(self._describer.duplicate_role_name(role.name))
        self._probe.write_failed(operation, role.id, str(error.orig))
        return IdentityResult.failed(self._describer.default_error())
