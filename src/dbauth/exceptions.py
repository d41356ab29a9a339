"""Authentication exceptions.

These exceptions are raised by the dbauth handler and services. Every
one of them is request-scoped: the dispatcher turns them into HTTP
responses, nothing here is fatal to the process.
"""


class DbAuthError(Exception):
    """Base exception for all session authentication errors."""

    def __init__(self, message: str = "Authentication error"):
        self.message = message
        super().__init__(self.message)


# Input validation


class UsernameAndPasswordRequiredError(DbAuthError):
    """Raised when login is attempted without a username or password."""

    def __init__(self, message: str = "Username and password are required"):
        super().__init__(message)


class FieldRequiredError(DbAuthError):
    """Raised when signup is attempted without a required field."""

    def __init__(self, name: str = "Field", message: str | None = None):
        self.name = name
        super().__init__(message or f"{name} is required")


# Identity


class UserNotFoundError(DbAuthError):
    """Raised when no user record matches the username or session id."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class IncorrectPasswordError(DbAuthError):
    """Raised when the password does not match the stored hash."""

    def __init__(self, message: str = "Incorrect password"):
        super().__init__(message)


class DuplicateUsernameError(DbAuthError):
    """Raised when signing up with a username that is already taken."""

    def __init__(self, username: str = "", message: str | None = None):
        self.username = username
        super().__init__(message or f"Username `{username}` already in use")


class NotLoggedInError(DbAuthError):
    """Raised when an operation needs a session and there is none."""

    def __init__(
        self,
        message: str = "Cannot retrieve user details without being logged in",
    ):
        super().__init__(message)


# Session integrity


class SessionDecryptionError(DbAuthError):
    """Raised when the session cookie cannot be decrypted or split."""

    def __init__(self, message: str = "Session has potentially been tampered with"):
        super().__init__(message)


class CsrfTokenMismatchError(DbAuthError):
    """Raised when the CSRF header does not echo the session token."""

    def __init__(self, message: str = "CSRF token mismatch"):
        super().__init__(message)


class SessionSecretMissingError(DbAuthError):
    """Raised when the session secret is not configured."""

    def __init__(self, message: str = "Session secret is not configured"):
        super().__init__(message)


# Dispatch


class MethodNotSpecifiedError(DbAuthError):
    """Raised when no auth method can be resolved from the request."""

    def __init__(self, message: str = "Auth method not specified"):
        super().__init__(message)


class UnknownMethodError(DbAuthError):
    """Raised when the requested auth method is not one we handle."""

    def __init__(self, method: str = "", message: str | None = None):
        self.method = method
        super().__init__(message or f"Unknown auth method '{method}'")


class WrongVerbError(DbAuthError):
    """Raised when an auth method is called with the wrong HTTP verb."""

    def __init__(self, method: str = "", message: str | None = None):
        self.method = method
        super().__init__(message or f"Wrong HTTP verb for {method}")


# Trust boundary


class ForbiddenError(Exception):
    """Raised when a webhook signature cannot be verified.

    The message never says which check failed.
    """

    MESSAGE = "You don't have access to invoke this function."

    def __init__(self, message: str = MESSAGE):
        self.message = message
        super().__init__(self.message)
