"""
Exception classes raised by the user service and the record store.

Every error carries a human‑readable ``message`` which the API layer
returns verbatim as the response ``detail``.
"""

from typing import Optional


class UserAdminError(Exception):
    """Base exception for all user administration errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(UserAdminError):
    """Raised when a required field is missing or malformed."""

    pass


class DuplicateLoginError(UserAdminError):
    """Raised when a login is already taken by another record."""

    def __init__(self, login: str):
        self.login = login
        super().__init__("A user with this email already exists")


class UserNotFoundError(UserAdminError):
    """Raised when no record has the requested id."""

    def __init__(self, user_id: Optional[str]):
        self.user_id = user_id
        super().__init__(f"User '{user_id}' not found")


class InvalidCredentialsError(UserAdminError):
    """Raised when no record matches a login/password pair."""

    def __init__(self):
        super().__init__("Invalid login or password")


class StorageUnavailableError(UserAdminError):
    """Raised when the users document cannot be read or written."""

    pass
