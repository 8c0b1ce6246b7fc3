"""Domain exceptions for the identity bounded context.

Expected failures of create/update/delete travel as IdentityResult values.
These exceptions cover the remaining cases, where the caller asked for
something that cannot be expressed as a result.
"""


class RoleNotFoundError(Exception):
    """Raised when adding a user to a role that does not exist.

    The manager only checks membership before calling the store, so a
    missing role surfaces from UserManager.add_to_role as this exception.
    """

    def __init__(self, role_name: str):
        super().__init__(f"Role {role_name} does not exist.")
        self.role_name = role_name


class NotSupportedError(Exception):
    """Raised when the configured store lacks a required capability.

    Managers accept any store implementing IUserStore or IRoleStore and only
    reach for optional capabilities (claims, logins, tokens, roles, queries)
    when the caller uses them.
    """

    pass
