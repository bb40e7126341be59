"""gistdrop -- publish a file as a GitHub gist from the file manager.

Right-click a file, choose *Upload to Gist*, and the gist URL lands on the
clipboard.  Authentication uses the OAuth device flow, so no client secret
ever ships with the tool.

Typical workflow::

    gistdrop auth login --client-id Iv1.0123456789abcdef
    gistdrop menu install
    gistdrop upload notes.txt --public

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    auth: Device flow and credential storage.
    gist: Gist creation client.
    shell: File-manager context-menu registration.
"""

__version__ = "0.1.0"
