"""Database infrastructure - shared connection primitives."""

from infrastructure.database.exceptions import (
    DatabaseConnectionError,
    DatabaseError,
)
from infrastructure.database.session_scope import SessionScope, SessionSource

__all__ = [
    "DatabaseConnectionError",
    "DatabaseError",
    "SessionScope",
    "SessionSource",
]
