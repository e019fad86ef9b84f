"""PKCE (Proof Key for Code Exchange) primitives for OAuth 2.1 security.

Implements RFC 7636 code verifier generation and S256 code challenge
derivation. S256 is the only supported method; there is no fallback to
``plain`` when hashing is unavailable.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from urllib.parse import quote

from pkceflow.constants import MAX_VERIFIER_LENGTH, MIN_VERIFIER_LENGTH
from pkceflow.models.errors import CryptoUnavailableError

# Characters encodeURIComponent leaves untouched besides alphanumerics and "_.-~"
_URI_COMPONENT_SAFE = "!*'()"


def generate_verifier(prefix: str | None = None) -> str:
    """Generate a code verifier, optionally starting with ``prefix``.

    Random hex characters are appended until the verifier reaches the RFC
    7636 minimum length. The result is percent-encoded and truncated to the
    maximum length. A prefix at or above the minimum length gets no random
    suffix, so callers passing long prefixes can produce identical verifiers.

    Args:
        prefix: Optional leading characters for the verifier

    Returns:
        A URL-safe code verifier of 43 to 128 characters for short prefixes

    Raises:
        CryptoUnavailableError: If no secure random source is available
    """
    verifier = prefix or ""
    if len(verifier) < MIN_VERIFIER_LENGTH:
        verifier += _random_hex(MIN_VERIFIER_LENGTH - len(verifier))
    return quote(verifier, safe=_URI_COMPONENT_SAFE)[:MAX_VERIFIER_LENGTH]


async def compute_challenge(verifier: str) -> str:
    """Derive the S256 code challenge for a code verifier.

    RFC 7636 Section 4.2: BASE64URL-ENCODE(SHA256(ASCII(code_verifier)))

    Args:
        verifier: The code verifier to hash

    Returns:
        Base64url-encoded SHA256 hash of the verifier, without padding

    Raises:
        CryptoUnavailableError: If SHA-256 is not available in this runtime
    """
    try:
        digest = hashlib.new("sha256", verifier.encode("utf-8")).digest()
    except ValueError as e:
        raise CryptoUnavailableError(
            "SHA-256 is required for the S256 code challenge method"
        ) from e

    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def _random_hex(length: int) -> str:
    try:
        random_bytes = secrets.token_bytes((length + 1) // 2)
    except NotImplementedError as e:
        raise CryptoUnavailableError(
            "A cryptographically secure random source is required"
        ) from e
    return random_bytes.hex()[:length]
