"""Exception hierarchy for PKCE authorization code flows.

Provides specific exception types for each failure mode so callers can tell
a lost flow state apart from misconfiguration or a failed token request.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all OAuth 2.1 related errors."""

    pass


class ConfigurationError(OAuth2Error):
    """Raised when the client id or redirect URI is missing at exchange time."""

    pass


class TransportError(OAuth2Error):
    """Raised when the token endpoint call fails at the network or HTTP layer.

    For HTTP error responses the status code and the OAuth error fields
    (RFC 6749 Section 5.2) are kept on the exception when the server sent them.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error: str | None = None,
        error_description: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.error_description = error_description


class PKCEError(OAuth2Error):
    """Raised when PKCE state or parameters are unusable."""

    pass


class PreconditionError(PKCEError):
    """Raised when the code or code verifier is missing at exchange time."""

    pass


class StateNotFoundError(PKCEError):
    """Raised when no code verifier is found in any storage tier.

    Usually means the callback was handled twice, or a concurrent flow
    already consumed or cleared the stored state. Retrying will not help;
    the authorization flow has to be restarted.
    """

    pass


class FlowInProgressError(PKCEError):
    """Raised by a strict meta store when another flow's verifier is stored."""

    pass


class CryptoUnavailableError(PKCEError):
    """Raised when the secure random source or SHA-256 is not available."""

    pass
