"""SQLAlchemy ORM model for the identity_roles table."""

from __future__ import annotations

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class RoleModel(Base, TimestampMixin):
    """ORM model for the identity_roles table.

    Role names are unique by their normalized form.
    """

    __tablename__ = "identity_roles"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    normalized_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    concurrency_stamp: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        Index("ix_identity_roles_normalized_name", "normalized_name", unique=True),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<RoleModel(id={self.id}, name={self.name})>"
