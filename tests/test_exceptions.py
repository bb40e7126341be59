"""Tests for the error taxonomy and exit codes."""

from __future__ import annotations

import pytest

from gistdrop import exit_codes
from gistdrop.exceptions import (
    AuthorizationDeniedError,
    ConfigError,
    DeviceCodeExpiredError,
    EndpointUnavailableError,
    ErrorKind,
    GistdropError,
    InvalidContentError,
    InvalidInputError,
    NetworkError,
    PollTimeoutError,
    RateLimitedOrForbiddenError,
    RemoteError,
    UnauthenticatedError,
    UnexpectedRemoteError,
)


@pytest.mark.parametrize(
    ("exc", "kind", "code"),
    [
        (InvalidInputError("x"), ErrorKind.INVALID_INPUT, exit_codes.EXIT_INVALID_USAGE),
        (NetworkError("x"), ErrorKind.NETWORK_ERROR, exit_codes.EXIT_CONNECTION_ERROR),
        (RemoteError("x", status=500), ErrorKind.REMOTE_ERROR, exit_codes.EXIT_REMOTE_ERROR),
        (UnauthenticatedError("x"), ErrorKind.UNAUTHENTICATED, exit_codes.EXIT_AUTH_FAILURE),
        (
            RateLimitedOrForbiddenError("x"),
            ErrorKind.RATE_LIMITED_OR_FORBIDDEN,
            exit_codes.EXIT_AUTH_FAILURE,
        ),
        (EndpointUnavailableError("x"), ErrorKind.ENDPOINT_UNAVAILABLE, exit_codes.EXIT_NOT_FOUND),
        (InvalidContentError("x"), ErrorKind.INVALID_CONTENT, exit_codes.EXIT_REMOTE_ERROR),
        (DeviceCodeExpiredError("x"), ErrorKind.DEVICE_CODE_EXPIRED, exit_codes.EXIT_AUTH_FAILURE),
        (AuthorizationDeniedError("x"), ErrorKind.AUTHORIZATION_DENIED, exit_codes.EXIT_AUTH_FAILURE),
        (
            UnexpectedRemoteError("x", code="bad"),
            ErrorKind.UNEXPECTED_REMOTE_ERROR,
            exit_codes.EXIT_REMOTE_ERROR,
        ),
        (PollTimeoutError("x"), ErrorKind.TIMEOUT, exit_codes.EXIT_TIMEOUT),
        (ConfigError("x"), ErrorKind.CONFIG_ERROR, exit_codes.EXIT_GENERIC_FAILURE),
    ],
)
def test_kind_and_exit_code(exc: GistdropError, kind: ErrorKind, code: int) -> None:
    assert isinstance(exc, GistdropError)
    assert exc.kind == kind
    assert exc.exit_code == code
    assert str(exc) == "x"


def test_exit_code_override() -> None:
    assert GistdropError("x", exit_code=42).exit_code == 42


def test_remote_error_keeps_status() -> None:
    assert RemoteError("x", status=418).status == 418


def test_unexpected_remote_error_keeps_code() -> None:
    assert UnexpectedRemoteError("x", code="incorrect_client_credentials").code == (
        "incorrect_client_credentials"
    )
