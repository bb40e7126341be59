"""Persistent store for the single credential record.

Stores the record in ``~/.config/gistdrop/credentials.json`` (XDG) or the
platform-equivalent directory.  Files are written atomically via
:func:`~gistdrop.config.atomic_write` with ``0o600`` permissions so that the
token is never world-readable, even momentarily.

Reads never fail the caller: anything short of a well-formed record with a
non-blank token is reported as absence.

See Also:
    :class:`~gistdrop.auth.device_flow.AuthorizationPoller` -- produces the
    token that is saved here.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from gistdrop import __version__
from gistdrop.config import atomic_write, credentials_path
from gistdrop.models import CredentialRecord

logger = logging.getLogger(__name__)


class CredentialStore:
    """Read/write the credential record at a fixed path.

    Args:
        path: File that holds the record.  Defaults to
            :func:`~gistdrop.config.credentials_path`.

    Example::

        store = CredentialStore(tmp_path / "credentials.json")
        store.save("gho_abc", "Iv1.123")
        assert store.load().access_token == "gho_abc"
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path if path is not None else credentials_path()

    @property
    def path(self) -> Path:
        """The filesystem path of the credential file."""
        return self._path

    def save(self, token: str, client_id: str) -> CredentialRecord:
        """Persist a new record, replacing any previous one entirely.

        Args:
            token: The bearer token returned by the device flow.
            client_id: The OAuth client id the token was issued to.

        Returns:
            The record that was written.

        Raises:
            OSError: If the file cannot be written (permissions, disk full, etc.).
        """
        record = CredentialRecord(
            client_id=client_id,
            access_token=token,
            version=__version__,
        )
        text = json.dumps(record.model_dump(mode="json"), indent=2) + "\n"
        atomic_write(self._path, text, mode=0o600)
        logger.info("Saved credentials for client %s to %s", client_id, self._path)
        return record

    def load(self) -> Optional[CredentialRecord]:
        """Load the stored record.

        Returns:
            The :class:`~gistdrop.models.CredentialRecord`, or ``None`` if the
            file is missing, cannot be parsed, has no ``access_token`` field,
            or the token is blank.
        """
        if not self._path.is_file():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            record = CredentialRecord.model_validate(data)
        except (json.JSONDecodeError, ValueError, OSError) as exc:
            logger.debug("Ignoring unreadable credential file %s: %s", self._path, exc)
            return None
        if not record.access_token.strip():
            return None
        return record

    def is_configured(self) -> bool:
        """Return ``True`` iff :meth:`load` yields a record with a non-blank token."""
        return self.load() is not None

    def clear(self) -> bool:
        """Delete the stored record.

        Returns:
            ``True`` if a file was removed, ``False`` if there was nothing to
            delete.
        """
        if self._path.is_file():
            self._path.unlink()
            logger.info("Removed credentials at %s", self._path)
            return True
        return False
