"""Client configuration for PKCE flows."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from pkceflow.constants import PKCE_STORAGE_KEY

DEFAULT_STORAGE_PATH = Path.home() / ".pkceflow" / "storage.json"


class StorageOptions(BaseModel):
    """Options used to resolve the storage tier that holds flow state.

    ``cookies`` is passed through to the backends untouched.
    """

    prefer_durable: bool = False
    storage_key: str = PKCE_STORAGE_KEY
    storage_path: Path = DEFAULT_STORAGE_PATH
    cookies: dict[str, Any] = Field(default_factory=dict)

    def merged(self, overrides: dict[str, Any] | None = None) -> StorageOptions:
        """Return a copy with per-call overrides applied."""
        if not overrides:
            return self
        return self.model_copy(update=overrides)


class PKCEClientConfig(BaseModel):
    """Configuration for a PKCE client.

    ``client_id`` and ``redirect_uri`` may be left unset here; they are
    checked when a code is exchanged so the error points at the token call.
    """

    client_id: str | None = None
    redirect_uri: str | None = None
    token_url: str
    timeout: float = Field(default=30.0, gt=0)
    storage: StorageOptions = Field(default_factory=StorageOptions)

    @field_validator("redirect_uri")
    @classmethod
    def validate_redirect(cls, v: str | None) -> str | None:
        if v is not None and not validate_redirect_uri(v):
            raise ValueError("redirect_uri must use https or an http loopback host")
        return v


def validate_redirect_uri(uri: str) -> bool:
    """Validate redirect URI meets OAuth 2.1 security requirements.

    Args:
        uri: Redirect URI to validate

    Returns:
        True if URI is valid for OAuth 2.1
    """
    try:
        parsed = urlparse(uri)
        # Must be HTTPS or loopback
        return parsed.scheme == "https" or (
            parsed.scheme == "http"
            and parsed.hostname in ("localhost", "127.0.0.1", "::1")
        )
    except ValueError:
        return False
