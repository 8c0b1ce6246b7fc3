"""Database-specific exceptions shared by all stores."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when the database cannot be reached or drops the connection.

    Stores surface this to callers and do not retry.
    """

    pass
