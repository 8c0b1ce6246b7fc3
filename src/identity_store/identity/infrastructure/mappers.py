"""Conversion between ORM rows and identity aggregates."""

from __future__ import annotations

from typing import Any

from identity.domain.aggregates import IdentityRole, IdentityUser
from identity.infrastructure.models import RoleModel, UserModel


def user_from_model(model: UserModel) -> IdentityUser:
    """Build an IdentityUser aggregate from its row."""
    return IdentityUser(
        id=model.id,
        user_name=model.user_name,
        normalized_user_name=model.normalized_user_name,
        email=model.email,
        normalized_email=model.normalized_email,
        email_confirmed=model.email_confirmed,
        password_hash=model.password_hash,
        security_stamp=model.security_stamp,
        concurrency_stamp=model.concurrency_stamp,
        phone_number=model.phone_number,
        phone_number_confirmed=model.phone_number_confirmed,
        two_factor_enabled=model.two_factor_enabled,
        lockout_enabled=model.lockout_enabled,
        lockout_end=model.lockout_end,
        access_failed_count=model.access_failed_count,
    )


def user_values(user: IdentityUser) -> dict[str, Any]:
    """Column values of a user, excluding id and concurrency stamp."""
    return {
        "user_name": user.user_name,
        "normalized_user_name": user.normalized_user_name,
        "email": user.email,
        "normalized_email": user.normalized_email,
        "email_confirmed": user.email_confirmed,
        "password_hash": user.password_hash,
        "security_stamp": user.security_stamp,
        "phone_number": user.phone_number,
        "phone_number_confirmed": user.phone_number_confirmed,
        "two_factor_enabled": user.two_factor_enabled,
        "lockout_enabled": user.lockout_enabled,
        "lockout_end": user.lockout_end,
        "access_failed_count": user.access_failed_count,
    }


def role_from_model(model: RoleModel) -> IdentityRole:
    """Build an IdentityRole aggregate from its row."""
    return IdentityRole(
        id=model.id,
        name=model.name,
        normalized_name=model.normalized_name,
        concurrency_stamp=model.concurrency_stamp,
    )


def role_values(role: IdentityRole) -> dict[str, Any]:
    """Column values of a role, excluding id and concurrency stamp."""
    return {
        "name": role.name,
        "normalized_name": role.normalized_name,
    }
