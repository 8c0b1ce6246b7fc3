"""User aggregate for the identity context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from identity.domain.value_objects import new_stamp


@dataclass
class IdentityUser:
    """A local user account.

    The id is assigned by the store on creation when left unset and never
    changes afterwards. Normalized fields are maintained by the manager and
    are what uniqueness and lookups run against.

    concurrency_stamp must change whenever the user is persisted; the store
    compares it on update and delete to detect lost updates.
    """

    user_name: str | None = None
    id: str | None = None
    normalized_user_name: str | None = None
    email: str | None = None
    normalized_email: str | None = None
    email_confirmed: bool = False
    password_hash: str | None = None
    security_stamp: str | None = None
    concurrency_stamp: str = field(default_factory=new_stamp)
    phone_number: str | None = None
    phone_number_confirmed: bool = False
    two_factor_enabled: bool = False
    lockout_enabled: bool = False
    lockout_end: datetime | None = None
    access_failed_count: int = 0

    def __str__(self) -> str:
        """Return string representation."""
        return f"IdentityUser({self.user_name})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, IdentityUser):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id) if self.id is not None else id(self)

    def is_locked_out(self, now: datetime | None = None) -> bool:
        """Whether the account is currently locked out."""
        if not self.lockout_enabled or self.lockout_end is None:
            return False
        now = now or datetime.now(timezone.utc)
        lockout_end = self.lockout_end
        if lockout_end.tzinfo is None:
            lockout_end = lockout_end.replace(tzinfo=timezone.utc)
        return lockout_end > now
