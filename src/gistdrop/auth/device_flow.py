"""OAuth2 Device Authorization Grant (:rfc:`8628`) against GitHub.

A command-line tool cannot receive a browser redirect, so gistdrop
authenticates the way ``gh auth login`` does:

Flow:
    1. :class:`DeviceAuthorizationInitiator` POSTs to the device-code
       endpoint and returns a :class:`~gistdrop.models.DeviceAuthorizationSession`
       holding ``device_code`` + ``user_code``.
    2. The caller prints "Go to {verification_uri} and enter code:
       {user_code}".
    3. :class:`AuthorizationPoller` polls the token endpoint until the user
       approves, denies, the code expires, or the polling window closes.
    4. The caller persists the token via
       :class:`~gistdrop.auth.credential_store.CredentialStore`.

Each token-endpoint reply is decoded once into a :class:`TokenPollResponse`
tagged with a :class:`PollOutcome`.  The poller then looks the outcome up in
:data:`TRANSITIONS` to get the next :class:`PollState`; error codes are never
compared as strings past the decoding step.

Timing rules:

* The polling interval is never below :data:`MIN_POLL_INTERVAL` seconds.
* ``slow_down`` adds :data:`SLOW_DOWN_INCREMENT` seconds, cumulatively.
* Before every attempt the poller gives up once the elapsed time exceeds
  ``min(expires_in, MAX_POLL_SECONDS)``, whatever the server said.
"""

from __future__ import annotations

import enum
import logging
import time
from typing import Any, Callable, Optional

import httpx
from pydantic import BaseModel, ValidationError

from gistdrop.exceptions import (
    AuthorizationDeniedError,
    DeviceCodeExpiredError,
    InvalidInputError,
    NetworkError,
    PollTimeoutError,
    RemoteError,
    UnexpectedRemoteError,
)
from gistdrop.models import DEFAULT_SCOPE, AppConfig, DeviceAuthorizationSession

logger = logging.getLogger(__name__)

DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"
MIN_POLL_INTERVAL = 5
SLOW_DOWN_INCREMENT = 5
MAX_POLL_SECONDS = 900

Clock = Callable[[], float]
Sleeper = Callable[[float], None]
ProgressCallback = Callable[[DeviceAuthorizationSession, "PollState"], None]


class PollState(str, enum.Enum):
    """States of the authorization poller."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    EXPIRED = "expired"
    SLOW_DOWN = "slow_down"
    NETWORK_BLIP = "network_blip"
    FATAL_ERROR = "fatal_error"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {PollState.APPROVED, PollState.DENIED, PollState.EXPIRED, PollState.FATAL_ERROR}
)


class PollOutcome(str, enum.Enum):
    """What a single token-endpoint attempt produced."""

    ACCESS_TOKEN = "access_token"
    AUTHORIZATION_PENDING = "authorization_pending"
    SLOW_DOWN = "slow_down"
    EXPIRED_TOKEN = "expired_token"
    ACCESS_DENIED = "access_denied"
    OTHER_ERROR = "other_error"
    TRANSPORT_FAILURE = "transport_failure"


# Wire error codes with a dedicated outcome; anything else is OTHER_ERROR.
_ERROR_CODES: dict[str, PollOutcome] = {
    "authorization_pending": PollOutcome.AUTHORIZATION_PENDING,
    "slow_down": PollOutcome.SLOW_DOWN,
    "expired_token": PollOutcome.EXPIRED_TOKEN,
    "access_denied": PollOutcome.ACCESS_DENIED,
}

TRANSITIONS: dict[PollOutcome, PollState] = {
    PollOutcome.ACCESS_TOKEN: PollState.APPROVED,
    PollOutcome.AUTHORIZATION_PENDING: PollState.PENDING,
    PollOutcome.SLOW_DOWN: PollState.SLOW_DOWN,
    PollOutcome.EXPIRED_TOKEN: PollState.EXPIRED,
    PollOutcome.ACCESS_DENIED: PollState.DENIED,
    PollOutcome.OTHER_ERROR: PollState.FATAL_ERROR,
    PollOutcome.TRANSPORT_FAILURE: PollState.NETWORK_BLIP,
}
"""Next poller state for each decoded outcome."""


class TokenPollResponse(BaseModel):
    """Tagged view of one token-endpoint reply."""

    outcome: PollOutcome
    access_token: Optional[str] = None
    error_code: Optional[str] = None
    error_description: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> TokenPollResponse:
        """Decode a parsed JSON body.

        A non-blank ``access_token`` always wins.  Otherwise the ``error``
        field selects the outcome; an unknown or missing code is
        :attr:`PollOutcome.OTHER_ERROR`.
        """
        if not isinstance(data, dict):
            return cls(outcome=PollOutcome.OTHER_ERROR, error_code="invalid_response")

        token = data.get("access_token")
        if isinstance(token, str) and token.strip():
            return cls(outcome=PollOutcome.ACCESS_TOKEN, access_token=token)

        code = str(data.get("error") or "missing_access_token")
        return cls(
            outcome=_ERROR_CODES.get(code, PollOutcome.OTHER_ERROR),
            error_code=code,
            error_description=data.get("error_description"),
        )

    @classmethod
    def transport_failure(cls, exc: Exception) -> TokenPollResponse:
        return cls(outcome=PollOutcome.TRANSPORT_FAILURE, error_description=str(exc))


def transition(outcome: PollOutcome) -> PollState:
    """Return the state entered after *outcome*."""
    return TRANSITIONS[outcome]


class DeviceAuthorizationInitiator:
    """Obtain a device code / user code pair from the device-code endpoint.

    Args:
        config: Effective configuration (endpoint URL and HTTP timeout).
        clock: Monotonic clock used to stamp ``start_time`` on the session.
            The poller must be given the same clock.
    """

    def __init__(self, config: AppConfig, clock: Clock = time.monotonic) -> None:
        self._config = config
        self._clock = clock

    def start(self, client_id: str, scope: str = DEFAULT_SCOPE) -> DeviceAuthorizationSession:
        """Request a device code.

        Args:
            client_id: The OAuth App client id.  Must not be blank.
            scope: Space-separated scopes to request.

        Returns:
            A fresh :class:`~gistdrop.models.DeviceAuthorizationSession`.

        Raises:
            InvalidInputError: If *client_id* is blank.
            NetworkError: On transport failure.
            RemoteError: On a non-success status or an unusable body.
        """
        if not client_id or not client_id.strip():
            raise InvalidInputError(
                "A client id is required: pass --client-id or set GISTDROP_CLIENT_ID"
            )

        data: dict[str, str] = {"client_id": client_id}
        if scope:
            data["scope"] = scope

        logger.debug("Requesting device code from %s", self._config.device_code_url)
        try:
            response = httpx.post(
                self._config.device_code_url,
                data=data,
                headers={"Accept": "application/json"},
                timeout=self._config.timeout,
            )
        except httpx.TransportError as exc:
            raise NetworkError(f"Device authorization request failed: {exc}") from exc

        if not response.is_success:
            raise RemoteError(
                f"Device authorization request failed with status "
                f"{response.status_code}: {response.text}",
                status=response.status_code,
            )

        try:
            result: dict[str, Any] = response.json()
        except ValueError as exc:
            raise RemoteError(
                "Device authorization response is not JSON", status=response.status_code
            ) from exc

        if not isinstance(result, dict):
            raise RemoteError(
                "Device authorization response is not a JSON object",
                status=response.status_code,
            )
        if "error" in result:
            desc = result.get("error_description") or result["error"]
            raise RemoteError(
                f"Device authorization request rejected: {desc}",
                status=response.status_code,
            )
        if "device_code" not in result:
            raise RemoteError(
                "Device authorization response missing 'device_code'",
                status=response.status_code,
            )
        if "user_code" not in result:
            raise RemoteError(
                "Device authorization response missing 'user_code'",
                status=response.status_code,
            )

        try:
            session = DeviceAuthorizationSession(
                device_code=result["device_code"],
                user_code=result["user_code"],
                verification_uri=result.get(
                    "verification_uri", result.get("verification_url", "")
                ),
                interval_seconds=result.get("interval", MIN_POLL_INTERVAL),
                expires_in_seconds=result.get("expires_in", MAX_POLL_SECONDS),
                start_time=self._clock(),
            )
        except ValidationError as exc:
            raise RemoteError(
                f"Malformed device authorization response: {exc}",
                status=response.status_code,
            ) from exc

        logger.info(
            "Device code issued (interval=%ss, expires_in=%ss)",
            session.interval_seconds,
            session.expires_in_seconds,
        )
        return session


class AuthorizationPoller:
    """Poll the token endpoint until the device session reaches a terminal state.

    One session is polled by one sequential loop.  The only way out is a
    terminal state or the polling window closing; there is no cancel signal.

    Args:
        config: Effective configuration (token URL and HTTP timeout).
        clock: Monotonic clock; must match the one that stamped the session.
        sleep: Suspends for the given number of seconds between attempts.
        on_progress: Called with the session and the new state after every
            attempt.  Purely cosmetic.
    """

    def __init__(
        self,
        config: AppConfig,
        clock: Clock = time.monotonic,
        sleep: Sleeper = time.sleep,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self._config = config
        self._clock = clock
        self._sleep = sleep
        self._on_progress = on_progress
        self._state = PollState.PENDING

    @property
    def state(self) -> PollState:
        """The state entered after the most recent attempt."""
        return self._state

    def poll(self, session: DeviceAuthorizationSession, client_id: str) -> str:
        """Run the polling loop.

        Args:
            session: The session returned by
                :meth:`DeviceAuthorizationInitiator.start`.  Its
                ``interval_seconds`` and ``poll_count`` are updated in place.
            client_id: The client id the device code was issued to.

        Returns:
            The access token.

        Raises:
            PollTimeoutError: Elapsed time exceeded ``min(expires_in, 900)``.
            DeviceCodeExpiredError: The server reported ``expired_token``.
            AuthorizationDeniedError: The user declined.
            UnexpectedRemoteError: Any other error code.
        """
        self._state = PollState.PENDING
        session.interval_seconds = max(session.interval_seconds, MIN_POLL_INTERVAL)
        limit = min(session.expires_in_seconds, MAX_POLL_SECONDS)

        while True:
            self._sleep(session.interval_seconds)

            elapsed = self._clock() - session.start_time
            if elapsed > limit:
                raise PollTimeoutError(
                    f"Device authorization timed out after {int(elapsed)}s -- please try again"
                )

            response = self._request_token(session.device_code, client_id)
            session.poll_count += 1
            self._state = transition(response.outcome)
            self._report(session)

            if self._state == PollState.APPROVED:
                assert response.access_token is not None
                logger.info("Device authorization approved after %d polls", session.poll_count)
                return response.access_token
            if self._state == PollState.SLOW_DOWN:
                session.interval_seconds += SLOW_DOWN_INCREMENT
                logger.debug("slow_down received, interval now %ss", session.interval_seconds)
                self._state = PollState.PENDING
            elif self._state == PollState.NETWORK_BLIP:
                logger.warning(
                    "Token poll failed at transport level, retrying: %s",
                    response.error_description,
                )
                self._state = PollState.PENDING
            elif self._state == PollState.EXPIRED:
                raise DeviceCodeExpiredError("Device code expired -- please try again")
            elif self._state == PollState.DENIED:
                raise AuthorizationDeniedError("Authorization denied by user")
            elif self._state == PollState.FATAL_ERROR:
                code = response.error_code or "unknown"
                desc = response.error_description or code
                raise UnexpectedRemoteError(
                    f"Device authorization failed: {desc}", code=code
                )

    def _request_token(self, device_code: str, client_id: str) -> TokenPollResponse:
        """POST once to the token endpoint and decode the reply."""
        data: dict[str, str] = {
            "client_id": client_id,
            "device_code": device_code,
            "grant_type": DEVICE_GRANT_TYPE,
        }
        try:
            response = httpx.post(
                self._config.token_url,
                data=data,
                headers={"Accept": "application/json"},
                timeout=self._config.timeout,
            )
        except httpx.TransportError as exc:
            return TokenPollResponse.transport_failure(exc)

        try:
            body = response.json()
        except ValueError:
            logger.debug("Non-JSON token response (status %s)", response.status_code)
            if not response.is_success:
                # A proxy or gateway answered, not the token endpoint.
                return TokenPollResponse(
                    outcome=PollOutcome.TRANSPORT_FAILURE,
                    error_description=f"HTTP {response.status_code} without a JSON body",
                )
            body = None
        return TokenPollResponse.from_json(body)

    def _report(self, session: DeviceAuthorizationSession) -> None:
        if self._on_progress is not None:
            self._on_progress(session, self._state)
