"""SQLAlchemy ORM model for external login bindings."""

from __future__ import annotations

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from identity.domain.value_objects import UserLoginInfo
from infrastructure.database.models import Base


class UserLoginMixin:
    """Login row keyed by (login_provider, provider_key).

    The composite primary key makes an external account bindable to at
    most one local user.
    """

    login_provider: Mapped[str] = mapped_column(String(128), primary_key=True)
    provider_key: Mapped[str] = mapped_column(String(128), primary_key=True)
    provider_display_name: Mapped[str | None] = mapped_column(
        String(256), nullable=True
    )

    @declared_attr
    def user_id(cls) -> Mapped[str]:
        return mapped_column(
            String(255),
            ForeignKey("identity_users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    def to_login_info(self) -> UserLoginInfo:
        """Build the login info this row represents."""
        return UserLoginInfo(
            login_provider=self.login_provider,
            provider_key=self.provider_key,
            provider_display_name=self.provider_display_name,
        )


class UserLoginModel(UserLoginMixin, Base):
    """ORM model for the identity_user_logins table."""

    __tablename__ = "identity_user_logins"

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<UserLoginModel(login_provider={self.login_provider}, "
            f"user_id={self.user_id})>"
        )
