"""Context-menu commands -- add or remove the "Upload to Gist" entry.

Provides the ``gistdrop menu`` sub-command group and the top-level
``gistdrop uninstall`` command, which also deletes the stored token.
"""

from __future__ import annotations

from typing import Optional

import typer

from gistdrop.exit_codes import EXIT_GENERIC_FAILURE
from gistdrop.output import error, info, success, suggest

menu_app = typer.Typer(no_args_is_help=True)


@menu_app.command("install")
def menu_install(
    command: Optional[str] = typer.Option(
        None,
        "--command",
        help='Command line to run, with "%1" for the file. Defaults to this interpreter.',
    ),
) -> None:
    """Register the file-manager context-menu entry.

    Example::

        gistdrop menu install
    """
    from gistdrop.shell import default_handler_template, default_registrar

    template = command or default_handler_template()
    if not default_registrar().register(template):
        error("Could not register the context-menu entry (see log file).")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)
    success('Added "Upload to Gist" to the file context menu.')


@menu_app.command("uninstall")
def menu_uninstall() -> None:
    """Remove the file-manager context-menu entry.

    Example::

        gistdrop menu uninstall
    """
    from gistdrop.shell import default_registrar

    if not default_registrar().unregister():
        error("Could not remove the context-menu entry (see log file).")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)
    success("Context-menu entry removed.")


def uninstall_command() -> None:
    """Remove the context-menu entry and delete the stored token.

    The token is deleted even if the registry could not be updated; the
    exit code still reports that failure.

    Example::

        gistdrop uninstall
    """
    from gistdrop.auth import CredentialStore
    from gistdrop.shell import default_registrar

    unregistered = default_registrar().unregister()
    if CredentialStore().clear():
        info("Stored credentials deleted.")

    if not unregistered:
        error("Could not remove the context-menu entry (see log file).")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)
    success("gistdrop uninstalled.")
    suggest("Remove the package itself: pip uninstall gistdrop")
