"""Structured outcomes for identity operations.

Stores and managers report expected failures (duplicate names, stale
concurrency stamps, invalid input) as an IdentityResult instead of raising,
so callers can surface every failure the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class IdentityError:
    """A single failure with a stable machine-readable code."""

    code: str
    description: str

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.code}: {self.description}"


@dataclass(frozen=True)
class IdentityResult:
    """Outcome of an identity operation."""

    succeeded: bool
    errors: tuple[IdentityError, ...] = field(default_factory=tuple)

    @classmethod
    def success(cls) -> IdentityResult:
        """Create a successful result."""
        return _SUCCESS

    @classmethod
    def failed(cls, *errors: IdentityError) -> IdentityResult:
        """Create a failed result carrying the given errors."""
        return cls(succeeded=False, errors=tuple(errors))

    @property
    def error_codes(self) -> list[str]:
        """Codes of all errors, in order."""
        return [error.code for error in self.errors]

    def __str__(self) -> str:
        """Return string representation."""
        if self.succeeded:
            return "Succeeded"
        return "Failed : " + ",".join(self.error_codes)


_SUCCESS = IdentityResult(succeeded=True)


class IdentityErrorDescriber:
    """Builds the IdentityError for each known failure.

    Subclass and override individual methods to localize or reword messages;
    codes should stay stable.
    """

    def default_error(self) -> IdentityError:
        return IdentityError("DefaultError", "An unknown failure has occurred.")

    def concurrency_failure(self) -> IdentityError:
        return IdentityError(
            "ConcurrencyFailure",
            "Optimistic concurrency failure, object has been modified.",
        )

    def duplicate_user_name(self, user_name: str | None) -> IdentityError:
        return IdentityError(
            "DuplicateUserName", f"User name '{user_name}' is already taken."
        )

    def duplicate_email(self, email: str | None) -> IdentityError:
        return IdentityError("DuplicateEmail", f"Email '{email}' is already taken.")

    def duplicate_role_name(self, role_name: str | None) -> IdentityError:
        return IdentityError(
            "DuplicateRoleName", f"Role name '{role_name}' is already taken."
        )

    def invalid_user_name(self, user_name: str | None) -> IdentityError:
        return IdentityError(
            "InvalidUserName",
            f"User name '{user_name}' is invalid, can only contain letters or digits.",
        )

    def invalid_role_name(self, role_name: str | None) -> IdentityError:
        return IdentityError("InvalidRoleName", f"Role name '{role_name}' is invalid.")

    def login_already_associated(self) -> IdentityError:
        return IdentityError(
            "LoginAlreadyAssociated", "A user with this login already exists."
        )

    def user_already_in_role(self, role: str) -> IdentityError:
        return IdentityError("UserAlreadyInRole", f"User already in role '{role}'.")

    def user_not_in_role(self, role: str) -> IdentityError:
        return IdentityError("UserNotInRole", f"User is not in role '{role}'.")

    def user_lockout_not_enabled(self) -> IdentityError:
        return IdentityError("UserLockoutNotEnabled", "Lockout is not enabled for this user.")
