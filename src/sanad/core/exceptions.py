"""Standardized exception hierarchy for the Sanad client core."""

from typing import Any


class SanadError(Exception):
    """Base exception for all client-core errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransientError(SanadError):
    """Errors that may succeed if the caller tries again later."""

    pass


class RemoteError(TransientError):
    """Remote API call failed (network failure or error response).

    Carries the server's message when one was returned.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        network: bool = False,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status = status
        self.network = network


class StorageError(TransientError):
    """Local persistence or serialization failed."""

    pass


class PermanentError(SanadError):
    """Errors that will not succeed on a repeated attempt."""

    pass


class ValidationError(PermanentError):
    """Invalid input or data format."""

    pass


class NotFoundError(PermanentError):
    """Requested entity does not exist."""

    pass


class StateError(PermanentError):
    """Invalid status transition."""

    pass


class ConfigurationError(PermanentError):
    """Missing or invalid configuration."""

    pass
