"""File-manager context-menu registration.

Only Windows Explorer is supported.  The entry lives under the current
user's hive, so no elevation is needed::

    HKEY_CURRENT_USER\\Software\\Classes\\*\\shell\\GistDrop
        (Default) = "Upload to Gist"
        Icon      = "<python.exe>"
        command\\
            (Default) = "<python.exe>" -m gistdrop upload "%1"

Callers only get a boolean back; the reason for a failure goes to the log.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, Optional

logger = logging.getLogger(__name__)

MENU_KEY = r"Software\Classes\*\shell\GistDrop"
COMMAND_KEY = MENU_KEY + r"\command"
MENU_LABEL = "Upload to Gist"


def default_handler_template(executable: Optional[str] = None) -> str:
    """Return the command line Explorer runs, with ``%1`` for the file path."""
    exe = executable or sys.executable
    return f'"{exe}" -m gistdrop upload "%1"'


class ContextMenuRegistrar(ABC):
    """Register or remove the "Upload to Gist" context-menu entry."""

    @abstractmethod
    def register(self, handler_template: str) -> bool:
        """Install the entry so that it runs *handler_template*.

        Returns:
            ``True`` on success, ``False`` otherwise.
        """
        ...

    @abstractmethod
    def unregister(self) -> bool:
        """Remove the entry.

        Returns:
            ``True`` if the entry is gone afterwards (including when it never
            existed), ``False`` otherwise.
        """
        ...


class WindowsRegistryRegistrar(ContextMenuRegistrar):
    """Registrar backed by the Windows registry.

    Args:
        registry: A module with the :mod:`winreg` API.  Defaults to the real
            ``winreg``, imported lazily so the class can be built anywhere.
        label: Menu text shown in Explorer.
    """

    def __init__(self, registry: Any = None, label: str = MENU_LABEL) -> None:
        self._registry = registry
        self._label = label

    def _winreg(self) -> Any:
        if self._registry is None:
            import winreg

            self._registry = winreg
        return self._registry

    def register(self, handler_template: str) -> bool:
        try:
            reg = self._winreg()
        except ImportError:
            logger.error("Context-menu registration is only available on Windows")
            return False

        icon = handler_template.split('"')[1] if handler_template.startswith('"') else ""
        try:
            with reg.CreateKey(reg.HKEY_CURRENT_USER, MENU_KEY) as key:
                reg.SetValueEx(key, "", 0, reg.REG_SZ, self._label)
                if icon:
                    reg.SetValueEx(key, "Icon", 0, reg.REG_SZ, icon)
            with reg.CreateKey(reg.HKEY_CURRENT_USER, COMMAND_KEY) as key:
                reg.SetValueEx(key, "", 0, reg.REG_SZ, handler_template)
        except OSError as exc:
            logger.error("Failed to register context menu: %s", exc)
            return False

        logger.info("Registered context menu: %s", handler_template)
        return True

    def unregister(self) -> bool:
        try:
            reg = self._winreg()
        except ImportError:
            logger.error("Context-menu registration is only available on Windows")
            return False

        # Subkeys first: DeleteKey refuses keys that still have children.
        for path in (COMMAND_KEY, MENU_KEY):
            try:
                reg.DeleteKey(reg.HKEY_CURRENT_USER, path)
            except FileNotFoundError:
                logger.debug("Registry key already absent: %s", path)
            except OSError as exc:
                logger.error("Failed to remove registry key %s: %s", path, exc)
                return False

        logger.info("Unregistered context menu")
        return True


def default_registrar() -> ContextMenuRegistrar:
    """Return the registrar for the current platform."""
    return WindowsRegistryRegistrar()
