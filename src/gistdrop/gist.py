"""Create gists through the GitHub REST API.

:class:`GistPublisher` makes exactly one HTTP call per operation and maps
non-success statuses onto the error taxonomy in :mod:`gistdrop.exceptions`:

====== ==========================================================
Status Exception
====== ==========================================================
401    :class:`~gistdrop.exceptions.UnauthenticatedError`
403    :class:`~gistdrop.exceptions.RateLimitedOrForbiddenError`
404    :class:`~gistdrop.exceptions.EndpointUnavailableError`
422    :class:`~gistdrop.exceptions.InvalidContentError`
other  :class:`~gistdrop.exceptions.RemoteError`
====== ==========================================================

There are no retries; failures propagate to the caller immediately.
"""

from __future__ import annotations

import codecs
import logging
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from gistdrop import __version__
from gistdrop.exceptions import (
    EndpointUnavailableError,
    InvalidContentError,
    InvalidInputError,
    NetworkError,
    RateLimitedOrForbiddenError,
    RemoteError,
    UnauthenticatedError,
)
from gistdrop.models import AppConfig, GistRequest, GistResult

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


def build_gist_request(
    path: Path,
    description: Optional[str] = None,
    is_public: bool = False,
) -> GistRequest:
    """Read *path* and wrap its contents in a :class:`~gistdrop.models.GistRequest`.

    The gist file takes the base name of *path*.  Content is decoded as
    UTF-8 with any byte-order mark removed.

    Raises:
        InvalidInputError: If the path is not a readable file, is not valid
            UTF-8 text, or is empty.
    """
    if not path.is_file():
        raise InvalidInputError(f"Not a file: {path}")
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise InvalidInputError(f"Cannot read {path}: {exc}") from exc

    if raw.startswith(codecs.BOM_UTF8):
        raw = raw[len(codecs.BOM_UTF8):]
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidInputError(f"{path.name} is not UTF-8 text") from exc

    if not content.strip():
        raise InvalidInputError(f"{path.name} is empty")

    return GistRequest(
        filename=path.name,
        content=content,
        description=description or "",
        is_public=is_public,
    )


class GistPublisher:
    """Thin client for the gist endpoints.

    Args:
        config: Effective configuration (``api_url`` and ``timeout``).

    Example::

        publisher = GistPublisher(config)
        result = publisher.publish(token, GistRequest(filename="a.txt", content="hi"))
        print(result.html_url)
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config

    def publish(self, token: str, request: GistRequest) -> GistResult:
        """Create a single-file gist.

        Args:
            token: Bearer token.  Must not be blank.
            request: The gist to create.

        Returns:
            The created gist's id and URL.

        Raises:
            UnauthenticatedError: Blank token or HTTP 401.
            RateLimitedOrForbiddenError: HTTP 403.
            EndpointUnavailableError: HTTP 404.
            InvalidContentError: HTTP 422.
            RemoteError: Any other non-2xx status or an unusable body.
            NetworkError: Transport failure.
        """
        self._require_token(token)
        url = f"{self._config.api_url.rstrip('/')}/gists"
        logger.info(
            "Creating %s gist for %s (%d chars)",
            "public" if request.is_public else "secret",
            request.filename,
            len(request.content),
        )
        response = self._send("POST", url, token, json_body=request.to_payload())
        try:
            result = GistResult.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise RemoteError(
                "Create-gist response did not include a URL", status=response.status_code
            ) from exc
        logger.info("Created gist %s", result.html_url)
        return result

    def whoami(self, token: str) -> str:
        """Return the login name the token belongs to.

        Raises:
            The same taxonomy as :meth:`publish`.
        """
        self._require_token(token)
        url = f"{self._config.api_url.rstrip('/')}/user"
        response = self._send("GET", url, token)
        try:
            login = response.json()["login"]
        except (ValueError, KeyError, TypeError) as exc:
            raise RemoteError(
                "User response did not include a login", status=response.status_code
            ) from exc
        return str(login)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _require_token(token: str) -> None:
        if not token or not token.strip():
            raise UnauthenticatedError("Not authenticated -- run `gistdrop auth login` first")

    def _send(
        self,
        method: str,
        url: str,
        token: str,
        json_body: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": f"gistdrop/{__version__}",
        }
        try:
            if method == "POST":
                response = httpx.post(
                    url, json=json_body, headers=headers, timeout=self._config.timeout
                )
            else:
                response = httpx.get(url, headers=headers, timeout=self._config.timeout)
        except httpx.TransportError as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc

        _map_response_error(response, url)
        return response


def _map_response_error(response: httpx.Response, url: str) -> None:
    """Raise the taxonomy error for a non-2xx *response*."""
    status = response.status_code
    if response.is_success:
        return

    detail = _error_message(response)
    if status == 401:
        raise UnauthenticatedError(
            f"GitHub rejected the stored token ({detail}) -- run `gistdrop auth login`"
        )
    if status == 403:
        raise RateLimitedOrForbiddenError(f"Rate limited or forbidden: {detail}")
    if status == 404:
        raise EndpointUnavailableError(f"Endpoint not found: {url}")
    if status == 422:
        raise InvalidContentError(f"GitHub refused the gist content: {detail}")
    raise RemoteError(f"HTTP {status}: {detail}", status=status)


def _error_message(response: httpx.Response) -> str:
    """Extract GitHub's ``message`` field, falling back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text[:200]
