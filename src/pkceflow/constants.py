"""Protocol constants shared across the PKCE flow."""

from __future__ import annotations

# RFC 7636 Section 4.1
MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128

DEFAULT_CODE_CHALLENGE_METHOD = "S256"

PKCE_STORAGE_KEY = "pkce-flow-storage"

GRANT_TYPE_AUTHORIZATION_CODE = "authorization_code"
GRANT_TYPE_INTERACTION_CODE = "interaction_code"

TOKEN_REQUEST_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "Accept": "application/json",
}
