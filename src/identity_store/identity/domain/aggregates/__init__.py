"""Domain aggregates for the identity context.

Aggregates are plain records; persistence rules live in the stores and
orchestration in the managers.
"""

from identity.domain.aggregates.role import IdentityRole
from identity.domain.aggregates.user import IdentityUser

__all__ = [
    "IdentityRole",
    "IdentityUser",
]
