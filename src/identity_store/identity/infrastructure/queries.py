"""Translation of typed predicates into SQLAlchemy WHERE clauses."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import ColumnElement

from identity.domain.queries import FieldPredicate, Operator, RoleField, UserField
from identity.infrastructure.models import RoleModel, UserModel

USER_COLUMNS: Mapping[UserField, Any] = {
    UserField.USER_NAME: UserModel.user_name,
    UserField.NORMALIZED_USER_NAME: UserModel.normalized_user_name,
    UserField.EMAIL: UserModel.email,
    UserField.NORMALIZED_EMAIL: UserModel.normalized_email,
}

ROLE_COLUMNS: Mapping[RoleField, Any] = {
    RoleField.NAME: RoleModel.name,
    RoleField.NORMALIZED_NAME: RoleModel.normalized_name,
}


def translate(
    predicate: FieldPredicate, columns: Mapping[Any, Any]
) -> ColumnElement[bool]:
    """Translate one predicate against the given field-to-column mapping.

    STARTS_WITH escapes LIKE wildcards so a prefix containing % or _ only
    matches literally.

    Raises:
        ValueError: If the field does not belong to the mapping or the
            operator is unknown
    """
    column = columns.get(predicate.field)
    if column is None:
        raise ValueError(f"Field {predicate.field!r} cannot be queried here")

    if predicate.operator == Operator.EQUALS:
        return column == predicate.value
    if predicate.operator == Operator.STARTS_WITH:
        return column.startswith(predicate.value, autoescape=True)
    raise ValueError(f"Unsupported operator {predicate.operator!r}")


def user_conditions(*predicates: FieldPredicate) -> list[ColumnElement[bool]]:
    """Translate user predicates into conditions to AND together."""
    return [translate(predicate, USER_COLUMNS) for predicate in predicates]


def role_conditions(*predicates: FieldPredicate) -> list[ColumnElement[bool]]:
    """Translate role predicates into conditions to AND together."""
    return [translate(predicate, ROLE_COLUMNS) for predicate in predicates]
