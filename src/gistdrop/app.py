"""Typer application factory and CLI entry point for gistdrop.

This module wires together the top-level Typer application and registers the
built-in commands (``upload``, ``auth``, ``menu``, ``config``,
``uninstall``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml`` and the target of the context-menu command line. It is
the single place where errors are caught: every
:class:`~gistdrop.exceptions.GistdropError` raised by a component is logged,
reported on stderr, and turned into the matching exit code. Unhandled
exceptions are written to a crash log under the data directory.

See Also:
    :mod:`gistdrop.config`: Configuration resolution.
    :mod:`gistdrop.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any

import typer

from gistdrop import __version__
from gistdrop.exceptions import ConfigError, ErrorKind, GistdropError
from gistdrop.exit_codes import EXIT_GENERIC_FAILURE

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="gistdrop",
    help="Publish files as GitHub gists from the file manager.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"gistdrop {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~gistdrop.output.OutputManager` from CLI
    flags, attaches the log file, resolves the effective
    :class:`~gistdrop.models.AppConfig` and stores it in ``ctx.obj`` for
    sub-commands.  The log file is attached first so that a broken config
    file is still recorded there.
    """
    from gistdrop.config import resolve_config
    from gistdrop.logs import configure_logging, set_log_level
    from gistdrop.models import AppConfig
    from gistdrop.output import OutputFormat, OutputManager, set_output

    output = OutputManager(
        format=OutputFormat.JSON if json_output else OutputFormat.AUTO,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)

    log_path = configure_logging("DEBUG" if verbose else "INFO")
    try:
        config = resolve_config()
    except ConfigError as exc:
        # The config commands must stay usable to repair the file.
        if ctx.invoked_subcommand != "config":
            raise
        logger.warning("Using default config: %s", exc)
        output.warning(f"Using default settings: {exc}")
        config = AppConfig()
    if not verbose:
        set_log_level(config.log_level)
    output.debug(f"Logging to {log_path}")
    logger.debug("gistdrop %s invoked: %s", __version__, ctx.invoked_subcommand)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from gistdrop.commands.auth import auth_app  # noqa: E402
from gistdrop.commands.config import config_app  # noqa: E402
from gistdrop.commands.menu import menu_app, uninstall_command  # noqa: E402
from gistdrop.commands.upload import upload_command  # noqa: E402

app.command("upload")(upload_command)
app.command("uninstall")(uninstall_command)
app.add_typer(auth_app, name="auth", help="Authenticate with GitHub.")
app.add_typer(menu_app, name="menu", help="File-manager context-menu entry.")
app.add_typer(config_app, name="config", help="Configuration management.")


# ------------------------------------------------------------------ #
# Error reporting
# ------------------------------------------------------------------ #

_SUGGESTIONS: dict[ErrorKind, str] = {
    ErrorKind.UNAUTHENTICATED: "Sign in: gistdrop auth login",
    ErrorKind.DEVICE_CODE_EXPIRED: "Start over: gistdrop auth login",
    ErrorKind.TIMEOUT: "Start over: gistdrop auth login",
    ErrorKind.RATE_LIMITED_OR_FORBIDDEN: "Check the token has the 'gist' scope, or wait for the rate limit to reset",
    ErrorKind.NETWORK_ERROR: "Check your internet connection and try again",
    ErrorKind.CONFIG_ERROR: "Fix or delete the config file named above",
}


def report_error(exc: Exception) -> int:
    """Log and print *exc*, returning the process exit code.

    :class:`~gistdrop.exceptions.GistdropError` instances are reported as a
    one-line message plus an optional next step. Anything else is a bug: the
    traceback goes to a crash log and the exit code is generic.
    """
    from gistdrop.logs import write_crash_log
    from gistdrop.output import error, suggest

    if isinstance(exc, GistdropError):
        logger.error("%s: %s", exc.kind.value, exc)
        error(str(exc))
        hint = _SUGGESTIONS.get(exc.kind)
        if hint:
            suggest(hint)
        return exc.exit_code

    logger.exception("Unexpected error")
    log_path = write_crash_log()
    error(f"Unexpected error. Debug log: {log_path}")
    return EXIT_GENERIC_FAILURE


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``gistdrop`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        sys.exit(report_error(exc))
