"""Canonical Pydantic models shared across all gistdrop modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Persisted models** -- serialised as JSON in the user's config directory:
    :class:`AppConfig` and :class:`CredentialRecord`.

**Transient models** -- built per invocation and never written to disk:
    :class:`DeviceAuthorizationSession`, :class:`GistRequest` and
    :class:`GistResult`.

All models use Pydantic v2.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DEVICE_CODE_URL = "https://github.com/login/device/code"
DEFAULT_TOKEN_URL = "https://github.com/login/oauth/access_token"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_SCOPE = "gist"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# --- Configuration ---


class AppConfig(BaseModel):
    """User configuration persisted at ``~/.config/gistdrop/config.json``.

    Every component receives an instance of this model in its constructor;
    there is no process-wide configuration state.  Loaded and resolved by
    :func:`~gistdrop.config.resolve_config`, which layers CLI flags and
    ``GISTDROP_*`` environment variables on top of the file.

    Example::

        AppConfig(client_id="Iv1.0123456789abcdef", public_by_default=True)
    """

    model_config = ConfigDict(extra="forbid")

    client_id: Optional[str] = Field(
        default=None, description="OAuth App client id used for the device flow"
    )
    scope: str = Field(default=DEFAULT_SCOPE, description="OAuth scope to request")
    device_code_url: str = Field(
        default=DEFAULT_DEVICE_CODE_URL, description="Device authorization endpoint"
    )
    token_url: str = Field(default=DEFAULT_TOKEN_URL, description="Token polling endpoint")
    api_url: str = Field(default=DEFAULT_API_URL, description="REST API base URL")
    timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    public_by_default: bool = Field(
        default=False, description="Create public gists unless --secret is passed"
    )
    log_level: LogLevel = Field(default="INFO", description="Log file level")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


# --- Credentials ---


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialRecord(BaseModel):
    """The stored result of a successful device authorization.

    There is at most one record per user.  It is written by
    :meth:`~gistdrop.auth.credential_store.CredentialStore.save`, overwritten
    on re-authorization and removed by ``gistdrop auth logout`` or
    ``gistdrop uninstall``.

    Attributes:
        client_id: The OAuth client id the token was issued to.
        access_token: The bearer token.  A record whose token is blank is
            treated as absent.
        created_at: UTC time the record was written.
        version: gistdrop version that wrote the record.
    """

    client_id: str = ""
    access_token: str
    created_at: datetime = Field(default_factory=_utcnow)
    version: str = ""


# --- Device flow ---


class DeviceAuthorizationSession(BaseModel):
    """In-memory state of one device authorization attempt.

    Created by :class:`~gistdrop.auth.device_flow.DeviceAuthorizationInitiator`
    and consumed by :class:`~gistdrop.auth.device_flow.AuthorizationPoller`,
    which mutates ``interval_seconds`` and ``poll_count`` as it goes.

    ``start_time`` is a reading of the initiator's monotonic clock, not a wall
    clock timestamp, so elapsed time is immune to system clock changes.
    """

    device_code: str
    user_code: str
    verification_uri: str = ""
    interval_seconds: int = 5
    expires_in_seconds: int = 900
    start_time: float = 0.0
    poll_count: int = 0


# --- Gists ---


class GistRequest(BaseModel):
    """A single-file gist to create."""

    filename: str
    content: str
    description: str = ""
    is_public: bool = False

    @property
    def effective_description(self) -> str:
        """The description to send; falls back to the filename when blank."""
        return self.description if self.description.strip() else self.filename

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON body for the create-gist endpoint."""
        return {
            "description": self.effective_description,
            "public": self.is_public,
            "files": {self.filename: {"content": self.content}},
        }


class GistResult(BaseModel):
    """The subset of the create-gist response we use."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    html_url: str
