"""
Custom exception classes for the paneldash admin dashboard.

Controllers catch these to re-render a form or flash a friendly message
instead of surfacing a generic 500 error.
"""


class InvalidCredentials(Exception):
    """Raised when an email/password pair does not match a stored user."""

    def __init__(self, message: str = "These credentials do not match our records.") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class TooManyLoginAttempts(Exception):
    """Raised when a client exceeds the allowed number of failed logins."""

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        self.retry_after = retry_after
        self.message = message or f"Too many login attempts. Please try again in {retry_after} seconds."
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class InvalidResetToken(Exception):
    """Raised when a password reset token is unknown, used or expired."""

    def __init__(self, message: str = "This password reset link is invalid or has expired.") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class PasswordPolicyError(Exception):
    """Raised when a new password does not satisfy the password policy."""

    def __init__(self, message: str = "Password does not meet the requirements.") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class UserNotFoundError(Exception):
    """Raised when a user ID cannot be found in the store."""

    def __init__(self, message: str = "Error: user not found") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class PanelNotFoundError(Exception):
    """Raised when a panel id is not registered."""

    def __init__(self, message: str = "Error: panel not found") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message
