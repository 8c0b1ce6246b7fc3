"""Typed query predicates for user and role lookups.

Callers describe filters as data (field, operator, value) and the stores
translate them into the underlying query language, so no caller ever needs
to load a full table to filter it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class UserField(StrEnum):
    """Filterable user columns."""

    USER_NAME = "user_name"
    NORMALIZED_USER_NAME = "normalized_user_name"
    EMAIL = "email"
    NORMALIZED_EMAIL = "normalized_email"


class RoleField(StrEnum):
    """Filterable role columns."""

    NAME = "name"
    NORMALIZED_NAME = "normalized_name"


class Operator(StrEnum):
    """Supported comparison operators."""

    EQUALS = "equals"
    STARTS_WITH = "starts_with"


@dataclass(frozen=True)
class FieldPredicate:
    """A single comparison against one field.

    Example:
        FieldPredicate(UserField.USER_NAME, Operator.STARTS_WITH, "alice")
    """

    field: UserField | RoleField
    operator: Operator
    value: str


def user_name_equals(user_name: str) -> FieldPredicate:
    return FieldPredicate(UserField.USER_NAME, Operator.EQUALS, user_name)


def user_name_starts_with(prefix: str) -> FieldPredicate:
    return FieldPredicate(UserField.USER_NAME, Operator.STARTS_WITH, prefix)


def role_name_equals(role_name: str) -> FieldPredicate:
    return FieldPredicate(RoleField.NAME, Operator.EQUALS, role_name)


def role_name_starts_with(prefix: str) -> FieldPredicate:
    return FieldPredicate(RoleField.NAME, Operator.STARTS_WITH, prefix)
