"""SQLAlchemy ORM model for the identity_users table."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class UserModel(Base, TimestampMixin):
    """ORM model for the identity_users table.

    Notes:
    - id is VARCHAR(255) so externally issued ids fit as well as ULIDs
    - normalized_user_name carries the uniqueness guarantee; the raw
      user_name is kept for display and prefix queries
    - concurrency_stamp is compared-and-set by the store on every write
    """

    __tablename__ = "identity_users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    normalized_user_name: Mapped[str | None] = mapped_column(
        String(256), nullable=True
    )
    email: Mapped[str | None] = mapped_column(String(256), nullable=True)
    normalized_email: Mapped[str | None] = mapped_column(String(256), nullable=True)
    email_confirmed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    password_hash: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    security_stamp: Mapped[str | None] = mapped_column(String(64), nullable=True)
    concurrency_stamp: Mapped[str] = mapped_column(String(64), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    phone_number_confirmed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    two_factor_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    lockout_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    lockout_end: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    access_failed_count: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )

    __table_args__ = (
        Index(
            "ix_identity_users_normalized_user_name",
            "normalized_user_name",
            unique=True,
        ),
        Index("ix_identity_users_normalized_email", "normalized_email"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(id={self.id}, user_name={self.user_name})>"
