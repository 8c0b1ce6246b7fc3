"""SQLAlchemy ORM model for user authentication tokens."""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from infrastructure.database.models import Base


class UserTokenMixin:
    """Token row keyed by (user_id, login_provider, name)."""

    login_provider: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)

    @declared_attr
    def user_id(cls) -> Mapped[str]:
        return mapped_column(
            String(255),
            ForeignKey("identity_users.id", ondelete="CASCADE"),
            primary_key=True,
        )


class UserTokenModel(UserTokenMixin, Base):
    """ORM model for the identity_user_tokens table."""

    __tablename__ = "identity_user_tokens"

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<UserTokenModel(user_id={self.user_id}, "
            f"login_provider={self.login_provider}, name={self.name})>"
        )
