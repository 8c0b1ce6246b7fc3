"""Lookup normalization for user names, emails and role names."""

from __future__ import annotations

from typing import Protocol


class LookupNormalizer(Protocol):
    """Produces the key that uniqueness checks and lookups compare on."""

    def normalize_name(self, name: str | None) -> str | None: ...

    def normalize_email(self, email: str | None) -> str | None: ...


class UpperInvariantLookupNormalizer:
    """Normalizes by upper-casing; None passes through unchanged."""

    def normalize_name(self, name: str | None) -> str | None:
        if name is None:
            return None
        return name.upper()

    def normalize_email(self, email: str | None) -> str | None:
        return self.normalize_name(email)
