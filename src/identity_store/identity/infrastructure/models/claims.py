"""SQLAlchemy ORM models for user and role claims.

Claim rows are built from mixins so that a store can swap in a row class
with extra columns. A row class owns its claim conversion: to_claim(),
initialize_from_claim() and matches() must agree on which fields make up
a claim's identity. A row class that records the issuer overrides all three.
"""

from __future__ import annotations

from sqlalchemy import ColumnElement, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from identity.domain.value_objects import Claim
from infrastructure.database.models import Base


class ClaimRowMixin:
    """Columns and claim conversion shared by user and role claim rows."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    claim_type: Mapped[str | None] = mapped_column(String(256), nullable=True)
    claim_value: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_claim(self) -> Claim:
        """Build the claim this row represents."""
        return Claim(type=self.claim_type or "", value=self.claim_value or "")

    def initialize_from_claim(self, claim: Claim) -> None:
        """Copy the claim's fields onto this row."""
        self.claim_type = claim.type
        self.claim_value = claim.value

    @classmethod
    def matches(cls, claim: Claim) -> list[ColumnElement[bool]]:
        """SQL conditions selecting rows that represent the given claim."""
        return [cls.claim_type == claim.type, cls.claim_value == claim.value]


class UserClaimMixin(ClaimRowMixin):
    """Claim row owned by a user."""

    @declared_attr
    def user_id(cls) -> Mapped[str]:
        return mapped_column(
            String(255),
            ForeignKey("identity_users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class RoleClaimMixin(ClaimRowMixin):
    """Claim row owned by a role."""

    @declared_attr
    def role_id(cls) -> Mapped[str]:
        return mapped_column(
            String(255),
            ForeignKey("identity_roles.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class UserClaimModel(UserClaimMixin, Base):
    """ORM model for the identity_user_claims table."""

    __tablename__ = "identity_user_claims"

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<UserClaimModel(id={self.id}, user_id={self.user_id}, "
            f"claim_type={self.claim_type})>"
        )


class RoleClaimModel(RoleClaimMixin, Base):
    """ORM model for the identity_role_claims table."""

    __tablename__ = "identity_role_claims"

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<RoleClaimModel(id={self.id}, role_id={self.role_id}, "
            f"claim_type={self.claim_type})>"
        )
