"""Project-native typed exceptions for execution backend failures."""

from __future__ import annotations


class BackendAdapterError(Exception):
    """Base exception for adapter-level backend failures.

    Attributes:
        status_code: Optional upstream HTTP status code.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BackendConnectionError(BackendAdapterError, ConnectionError):
    """Transport-level failure while talking to the execution backend."""


class BackendTimeoutError(BackendAdapterError, TimeoutError):
    """Backend round-trip exceeded the adapter timeout."""


class BackendRejectedError(BackendAdapterError, ValueError):
    """Backend refused the submitted options or request."""


class BackendCredentialError(BackendRejectedError):
    """Backend rejected the configured credentials (`401`/`403`)."""


class BackendJobNotFoundError(BackendAdapterError, LookupError):
    """Backend has no job with the requested external identifier."""


class BackendResponseError(BackendAdapterError, RuntimeError):
    """Backend answered with a payload that breaks the response contract."""
