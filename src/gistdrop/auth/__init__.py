"""Authentication for gistdrop.

The main entry points are:

- :class:`DeviceAuthorizationInitiator` -- starts an OAuth device flow.
- :class:`AuthorizationPoller` -- polls until the user approves the device.
- :class:`CredentialStore` -- persistent storage for the resulting token.

Typical usage::

    from gistdrop.auth import AuthorizationPoller, CredentialStore, DeviceAuthorizationInitiator

    session = DeviceAuthorizationInitiator(config).start(client_id)
    token = AuthorizationPoller(config).poll(session, client_id)
    CredentialStore().save(token, client_id)
"""

from gistdrop.auth.credential_store import CredentialStore
from gistdrop.auth.device_flow import (
    AuthorizationPoller,
    DeviceAuthorizationInitiator,
    PollOutcome,
    PollState,
    TokenPollResponse,
)

__all__ = [
    "AuthorizationPoller",
    "CredentialStore",
    "DeviceAuthorizationInitiator",
    "PollOutcome",
    "PollState",
    "TokenPollResponse",
]
