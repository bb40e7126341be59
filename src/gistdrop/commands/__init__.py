"""Built-in CLI sub-commands for gistdrop.

This package groups the Typer modules that form the CLI's command tree:

* :mod:`~gistdrop.commands.upload` -- publish a file as a gist.
* :mod:`~gistdrop.commands.auth` -- device-flow login, status, logout.
* :mod:`~gistdrop.commands.menu` -- context-menu entry and ``uninstall``.
* :mod:`~gistdrop.commands.config` -- view and modify settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``auth`` and ``menu``) or a plain callback
function registered directly on the root app (for single commands like
``upload``).
"""
