"""Exception hierarchy for gistdrop.

All exceptions inherit from :class:`GistdropError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`gistdrop.exit_codes`
and a ``kind`` tag from :class:`ErrorKind`.  Components raise these errors
and let them propagate; the top-level handler in :func:`gistdrop.app.main`
is the only place that catches ``GistdropError``, logs it, reports it and
exits with the appropriate code.

Subclass hierarchy::

    GistdropError (exit 1)
    +-- InvalidInputError            (exit 2)
    +-- NetworkError                 (exit 6)
    +-- RemoteError(status)          (exit 5)
    +-- UnauthenticatedError         (exit 3)
    +-- RateLimitedOrForbiddenError  (exit 3)
    +-- EndpointUnavailableError     (exit 4)
    +-- InvalidContentError          (exit 5)
    +-- DeviceCodeExpiredError       (exit 3)
    +-- AuthorizationDeniedError     (exit 3)
    +-- UnexpectedRemoteError(code)  (exit 5)
    +-- PollTimeoutError             (exit 7)
    +-- ConfigError                  (exit 1)
"""

from __future__ import annotations

import enum
from typing import Optional

from gistdrop.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_REMOTE_ERROR,
    EXIT_TIMEOUT,
)


class ErrorKind(str, enum.Enum):
    """Taxonomy tag carried by every :class:`GistdropError`."""

    GENERIC = "generic"
    INVALID_INPUT = "invalid_input"
    NETWORK_ERROR = "network_error"
    REMOTE_ERROR = "remote_error"
    UNAUTHENTICATED = "unauthenticated"
    RATE_LIMITED_OR_FORBIDDEN = "rate_limited_or_forbidden"
    ENDPOINT_UNAVAILABLE = "endpoint_unavailable"
    INVALID_CONTENT = "invalid_content"
    DEVICE_CODE_EXPIRED = "device_code_expired"
    AUTHORIZATION_DENIED = "authorization_denied"
    UNEXPECTED_REMOTE_ERROR = "unexpected_remote_error"
    TIMEOUT = "timeout"
    CONFIG_ERROR = "config_error"


class GistdropError(Exception):
    """Base exception for all gistdrop errors.

    Every subclass sets a class-level ``exit_code`` and ``kind``.  The entry
    point catches this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE
    kind: ErrorKind = ErrorKind.GENERIC

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidInputError(GistdropError):
    """Raised for unusable input: blank client id, missing or unreadable file."""

    exit_code = EXIT_INVALID_USAGE
    kind = ErrorKind.INVALID_INPUT


class NetworkError(GistdropError):
    """Raised on transport-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR
    kind = ErrorKind.NETWORK_ERROR


class RemoteError(GistdropError):
    """Raised when the remote service answers with a status we have no better name for.

    Args:
        message: Human-readable error description.
        status: The HTTP status code, or ``None`` when the response body was
            unusable despite a success status.
    """

    exit_code = EXIT_REMOTE_ERROR
    kind = ErrorKind.REMOTE_ERROR

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class UnauthenticatedError(GistdropError):
    """Raised when no usable bearer token exists or the API rejects it (HTTP 401)."""

    exit_code = EXIT_AUTH_FAILURE
    kind = ErrorKind.UNAUTHENTICATED


class RateLimitedOrForbiddenError(GistdropError):
    """Raised when the API returns HTTP 403 (rate limit or missing scope)."""

    exit_code = EXIT_AUTH_FAILURE
    kind = ErrorKind.RATE_LIMITED_OR_FORBIDDEN


class EndpointUnavailableError(GistdropError):
    """Raised when the API returns HTTP 404 for a fixed endpoint."""

    exit_code = EXIT_NOT_FOUND
    kind = ErrorKind.ENDPOINT_UNAVAILABLE


class InvalidContentError(GistdropError):
    """Raised when the API refuses the gist body (HTTP 422)."""

    exit_code = EXIT_REMOTE_ERROR
    kind = ErrorKind.INVALID_CONTENT


class DeviceCodeExpiredError(GistdropError):
    """Raised when the token endpoint reports ``expired_token``."""

    exit_code = EXIT_AUTH_FAILURE
    kind = ErrorKind.DEVICE_CODE_EXPIRED


class AuthorizationDeniedError(GistdropError):
    """Raised when the user declines the device authorization request."""

    exit_code = EXIT_AUTH_FAILURE
    kind = ErrorKind.AUTHORIZATION_DENIED


class UnexpectedRemoteError(GistdropError):
    """Raised when the token endpoint returns an error code outside the device flow protocol.

    Args:
        message: Human-readable error description.
        code: The raw ``error`` value returned by the server.
    """

    exit_code = EXIT_REMOTE_ERROR
    kind = ErrorKind.UNEXPECTED_REMOTE_ERROR

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


class PollTimeoutError(GistdropError):
    """Raised when the device flow exceeds its polling window."""

    exit_code = EXIT_TIMEOUT
    kind = ErrorKind.TIMEOUT


class ConfigError(GistdropError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
    kind = ErrorKind.CONFIG_ERROR
