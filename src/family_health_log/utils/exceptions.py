"""Custom exceptions for the family health log."""


class HealthLogError(Exception):
    """Base exception for all family health log errors."""

    pass


class ConfigurationError(HealthLogError):
    """Raised when there is a configuration error."""

    pass


class StorageReadError(HealthLogError):
    """Raised when a user's persisted logs are corrupt or unreadable."""

    def __init__(self, user: str, message: str) -> None:
        super().__init__(message)
        self.user = user


class StorageWriteError(HealthLogError):
    """Raised when a user's logs cannot be serialized or written."""

    def __init__(self, user: str, message: str) -> None:
        super().__init__(message)
        self.user = user


class ValidationError(HealthLogError):
    """Raised when user input is malformed or missing a required field."""

    pass


class NotFoundError(HealthLogError):
    """Raised when an edit target does not exist."""

    pass
