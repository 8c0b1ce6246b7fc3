"""Validation applied by the managers before anything reaches a store."""

from __future__ import annotations

from identity.domain.aggregates import IdentityRole, IdentityUser
from identity.domain.results import IdentityError, IdentityErrorDescriber
from infrastructure.settings import IdentitySettings


class UserValidator:
    """Checks user names against the configured character set.

    An empty allowed_user_name_characters setting accepts any non-blank
    name.
    """

    def __init__(
        self,
        settings: IdentitySettings,
        describer: IdentityErrorDescriber,
    ) -> None:
        self._allowed = frozenset(settings.allowed_user_name_characters)
        self._describer = describer

    def validate(self, user: IdentityUser) -> list[IdentityError]:
        name = user.user_name
        if name is None or not name.strip():
            return [self._describer.invalid_user_name(name)]
        if self._allowed and any(ch not in self._allowed for ch in name):
            return [self._describer.invalid_user_name(name)]
        return []


class RoleValidator:
    """Rejects blank role names."""

    def __init__(self, describer: IdentityErrorDescriber) -> None:
        self._describer = describer

    def validate(self, role: IdentityRole) -> list[IdentityError]:
        if role.name is None or not role.name.strip():
            return [self._describer.invalid_role_name(role.name)]
        return []
