"""Role aggregate for the identity context."""

from __future__ import annotations

from dataclasses import dataclass, field

from identity.domain.value_objects import new_stamp


@dataclass
class IdentityRole:
    """A named role users can be placed in.

    Role names are unique by their normalized form.
    """

    name: str | None = None
    id: str | None = None
    normalized_name: str | None = None
    concurrency_stamp: str = field(default_factory=new_stamp)

    def __str__(self) -> str:
        """Return string representation."""
        return f"IdentityRole({self.name})"

    def __eq__(self, other: object) -> bool:
        """Roles are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, IdentityRole):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id) if self.id is not None else id(self)
