"""Best-effort clipboard copy.

Copying the gist URL is a convenience; the URL is always printed as well,
so a missing clipboard backend (headless session, no ``xclip``) only costs
a warning.
"""

from __future__ import annotations

import logging

import pyperclip

logger = logging.getLogger(__name__)


def copy_to_clipboard(text: str) -> bool:
    """Copy *text* to the system clipboard.

    Returns:
        ``True`` on success, ``False`` if no clipboard backend is usable.
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        logger.debug("Clipboard copy failed: %s", exc)
        return False
    return True
