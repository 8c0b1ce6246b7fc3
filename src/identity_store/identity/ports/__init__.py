"""Ports (interfaces) for the identity bounded context.

Ports define the contracts for stores without specifying implementation
details. This allows for dependency inversion and keeps the managers
independent of the persistence technology.
"""

from identity.ports.exceptions import NotSupportedError, RoleNotFoundError
from identity.ports.stores import (
    IQueryableRoleStore,
    IQueryableUserStore,
    IRoleClaimStore,
    IRoleStore,
    IUserAuthenticationTokenStore,
    IUserClaimStore,
    IUserEmailStore,
    IUserLoginStore,
    IUserRoleStore,
    IUserStore,
)

__all__ = [
    "IQueryableRoleStore",
    "IQueryableUserStore",
    "IRoleClaimStore",
    "IRoleStore",
    "IUserAuthenticationTokenStore",
    "IUserClaimStore",
    "IUserEmailStore",
    "IUserLoginStore",
    "IUserRoleStore",
    "IUserStore",
    "NotSupportedError",
    "RoleNotFoundError",
]
