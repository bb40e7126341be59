"""Auth commands -- sign in to GitHub with the device flow.

Provides the ``gistdrop auth`` sub-command group.

Typical workflow::

    gistdrop auth login --client-id Iv1.0123456789abcdef
    gistdrop auth status
    gistdrop auth logout
"""

from __future__ import annotations

import logging
import webbrowser
from typing import Optional

import typer

from gistdrop.exit_codes import EXIT_AUTH_FAILURE
from gistdrop.output import (
    debug,
    error,
    format_response,
    info,
    progress,
    success,
    suggest,
    warning,
)

logger = logging.getLogger(__name__)

auth_app = typer.Typer(no_args_is_help=True)


def _mask(token: str) -> str:
    if len(token) <= 8:
        return "********"
    return f"{token[:4]}...{token[-4:]}"


@auth_app.command("login")
def auth_login(
    client_id: Optional[str] = typer.Option(
        None, "--client-id", help="OAuth App client id (or set GISTDROP_CLIENT_ID)."
    ),
    scope: Optional[str] = typer.Option(
        None, "--scope", help="OAuth scope to request. Defaults to 'gist'."
    ),
    browser: bool = typer.Option(
        True, "--browser/--no-browser", help="Open the verification page automatically."
    ),
) -> None:
    """Authorize gistdrop with the OAuth device flow.

    Requests a device code, shows the user code and verification URL, waits
    for approval, then stores the token. Re-running replaces the stored
    token.

    Raises:
        InvalidInputError: No client id configured.
        AuthorizationDeniedError: The request was declined in the browser.
        DeviceCodeExpiredError: The code expired before approval.
        PollTimeoutError: No decision within the polling window.

    Example::

        gistdrop auth login --client-id Iv1.0123456789abcdef
    """
    from gistdrop.auth import (
        AuthorizationPoller,
        CredentialStore,
        DeviceAuthorizationInitiator,
        PollState,
    )
    from gistdrop.clipboard import copy_to_clipboard
    from gistdrop.config import resolve_config
    from gistdrop.exceptions import GistdropError
    from gistdrop.gist import GistPublisher
    from gistdrop.models import DeviceAuthorizationSession

    config = resolve_config(cli_client_id=client_id, cli_scope=scope)
    resolved_client_id = config.client_id or ""

    session = DeviceAuthorizationInitiator(config).start(resolved_client_id, config.scope)

    info("")
    info(f"Go to: {session.verification_uri}")
    info(f"Enter code: {session.user_code}")
    if copy_to_clipboard(session.user_code):
        info("(code copied to clipboard)")
    if browser and session.verification_uri:
        webbrowser.open(session.verification_uri)
    info("")
    info("Waiting for authorization")

    def _on_progress(_session: DeviceAuthorizationSession, state: PollState) -> None:
        progress(".")
        if state == PollState.SLOW_DOWN:
            debug("Server asked to slow down")

    poller = AuthorizationPoller(config, on_progress=_on_progress)
    try:
        token = poller.poll(session, resolved_client_id)
    finally:
        progress("", newline=True)

    store = CredentialStore()
    store.save(token, resolved_client_id)

    try:
        login = GistPublisher(config).whoami(token)
    except GistdropError as exc:
        logger.warning("Could not verify new token: %s", exc)
        warning(f"Token saved, but verifying it failed: {exc}")
        return
    success(f"Logged in as {login}.")
    suggest("Add the context-menu entry: gistdrop menu install")


@auth_app.command("status")
def auth_status() -> None:
    """Show whether a GitHub token is stored.

    Exits with code 3 when no usable token exists.

    Example::

        gistdrop auth status
    """
    from gistdrop.auth import CredentialStore

    store = CredentialStore()
    record = store.load()
    if record is None:
        error("Not authenticated.")
        suggest("Sign in: gistdrop auth login")
        raise typer.Exit(code=EXIT_AUTH_FAILURE)

    format_response(
        {
            "client_id": record.client_id,
            "access_token": _mask(record.access_token),
            "created_at": record.created_at.isoformat(),
            "version": record.version,
            "path": str(store.path),
        }
    )


@auth_app.command("logout")
def auth_logout() -> None:
    """Delete the stored token.

    Example::

        gistdrop auth logout
    """
    from gistdrop.auth import CredentialStore

    if CredentialStore().clear():
        success("Logged out.")
    else:
        info("No stored credentials.")
