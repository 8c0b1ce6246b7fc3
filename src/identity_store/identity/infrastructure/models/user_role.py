"""SQLAlchemy ORM model for user-role membership."""

from __future__ import annotations

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from infrastructure.database.models import Base


class UserRoleMixin:
    """Join row keyed by (user_id, role_id); a pair can exist only once."""

    @declared_attr
    def user_id(cls) -> Mapped[str]:
        return mapped_column(
            String(255),
            ForeignKey("identity_users.id", ondelete="CASCADE"),
            primary_key=True,
        )

    @declared_attr
    def role_id(cls) -> Mapped[str]:
        return mapped_column(
            String(255),
            ForeignKey("identity_roles.id", ondelete="CASCADE"),
            primary_key=True,
            index=True,
        )


class UserRoleModel(UserRoleMixin, Base):
    """ORM model for the identity_user_roles table."""

    __tablename__ = "identity_user_roles"

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserRoleModel(user_id={self.user_id}, role_id={self.role_id})>"
