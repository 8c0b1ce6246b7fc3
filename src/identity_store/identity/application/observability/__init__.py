"""Domain-Oriented Observability for the identity application layer.

Probes for manager operations following Domain-Oriented Observability patterns.
"""

from identity.application.observability.role_manager_probe import (
    DefaultRoleManagerProbe,
    RoleManagerProbe,
)
from identity.application.observability.user_manager_probe import (
    DefaultUserManagerProbe,
    UserManagerProbe,
)

__all__ = [
    "UserManagerProbe",
    "DefaultUserManagerProbe",
    "RoleManagerProbe",
    "DefaultRoleManagerProbe",
]
