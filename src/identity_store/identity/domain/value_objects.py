"""Value objects for the identity domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
import uuid

from ulid import ULID

DEFAULT_ISSUER = "LOCAL AUTHORITY"


def generate_id() -> str:
    """Generate a new entity identifier using ULID."""
    return str(ULID())


def new_stamp() -> str:
    """Generate a fresh opaque security or concurrency stamp."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Claim:
    """A statement about a user or role.

    Two claims are the same claim only when type, value and issuer all match.
    Stores whose rows do not record an issuer hand back claims carrying
    DEFAULT_ISSUER.
    """

    type: str
    value: str
    issuer: str = DEFAULT_ISSUER

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.type}: {self.value}"


@dataclass(frozen=True)
class UserLoginInfo:
    """Binding of an external login provider account to a local user.

    The (login_provider, provider_key) pair identifies the external account
    and is unique across all users.
    """

    login_provider: str
    provider_key: str
    provider_display_name: str | None = None

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.login_provider}:{self.provider_key}"
