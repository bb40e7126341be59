"""The ``gistdrop upload`` command -- what the context-menu entry runs.

Reads the file, creates the gist with the stored token, prints the URL on
stdout and copies it to the clipboard.  Errors are raised, not handled here;
:func:`gistdrop.app.main` reports them and sets the exit code.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from gistdrop.output import info, print_data, success, warning

logger = logging.getLogger(__name__)


def upload_command(
    ctx: typer.Context,
    file: Path = typer.Argument(help="File to publish."),
    public: Optional[bool] = typer.Option(
        None,
        "--public/--secret",
        help="Gist visibility. Defaults to the 'public_by_default' setting.",
    ),
    description: str = typer.Option(
        "", "--description", "-d", help="Gist description. Defaults to the file name."
    ),
    clipboard: bool = typer.Option(
        True, "--clipboard/--no-clipboard", help="Copy the gist URL to the clipboard."
    ),
) -> None:
    """Publish FILE as a gist and print its URL.

    Raises:
        UnauthenticatedError: No stored token, or GitHub rejected it.
        InvalidInputError: FILE is missing, empty, or not UTF-8 text.

    Example::

        gistdrop upload notes.txt
        gistdrop upload script.py --public -d "Backup script"
    """
    from gistdrop.auth import CredentialStore
    from gistdrop.clipboard import copy_to_clipboard
    from gistdrop.exceptions import UnauthenticatedError
    from gistdrop.gist import GistPublisher, build_gist_request

    config = ctx.obj["config"]

    record = CredentialStore().load()
    if record is None:
        raise UnauthenticatedError("Not authenticated -- no stored GitHub token")

    is_public = config.public_by_default if public is None else public
    request = build_gist_request(file, description, is_public)

    info(f"Uploading {request.filename}...")
    result = GistPublisher(config).publish(record.access_token, request)
    print_data(result.html_url)

    if not clipboard:
        return
    if copy_to_clipboard(result.html_url):
        success("Gist URL copied to clipboard.")
    else:
        logger.warning("Clipboard unavailable; URL only printed")
        warning("Could not copy the URL to the clipboard.")
