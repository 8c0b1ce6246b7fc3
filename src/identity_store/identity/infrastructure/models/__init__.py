"""SQLAlchemy ORM models for the identity bounded context.

These models map to database tables and are used by the store
implementations. The *Mixin classes carry the base columns of each child
table so stores can be configured with row classes that add columns.
"""

from identity.infrastructure.models.claims import (
    ClaimRowMixin,
    RoleClaimMixin,
    RoleClaimModel,
    UserClaimMixin,
    UserClaimModel,
)
from identity.infrastructure.models.login import UserLoginMixin, UserLoginModel
from identity.infrastructure.models.role import RoleModel
from identity.infrastructure.models.token import UserTokenMixin, UserTokenModel
from identity.infrastructure.models.user import UserModel
from identity.infrastructure.models.user_role import UserRoleMixin, UserRoleModel

__all__ = [
    "ClaimRowMixin",
    "RoleClaimMixin",
    "RoleClaimModel",
    "RoleModel",
    "UserClaimMixin",
    "UserClaimModel",
    "UserLoginMixin",
    "UserLoginModel",
    "UserModel",
    "UserRoleMixin",
    "UserRoleModel",
    "UserTokenMixin",
    "UserTokenModel",
]
