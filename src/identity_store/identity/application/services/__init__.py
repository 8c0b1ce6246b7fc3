"""Application services for the identity bounded context.

The managers orchestrate validation, normalization and the store
capabilities to fulfill user and role use cases. They are the "front door"
to the identity context.
"""

from identity.application.services.role_manager import RoleManager
from identity.application.services.user_manager import UserManager

__all__ = [
    "RoleManager",
    "UserManager",
]
