"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~gistdrop.exceptions.GistdropError` subclass.
The context-menu handler and shell wrappers can inspect the exit code to
determine the failure class without parsing stderr.

Example::

    $ gistdrop upload notes.txt
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- no stored token, run `gistdrop auth login`
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unusable input file."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed (missing token, denied, expired code)."""

EXIT_NOT_FOUND = 4
"""The remote endpoint was not found (HTTP 404)."""

EXIT_REMOTE_ERROR = 5
"""The remote API rejected the request or returned an unexpected status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_TIMEOUT = 7
"""The device authorization flow ran out of time before the user approved it."""
