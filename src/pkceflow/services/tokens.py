"""Authorization code to token exchange for PKCE flows.

Implements the RFC 6749 Section 4.1.3 token request with the PKCE
code_verifier (RFC 7636), for both authorization codes and interaction
codes.
"""

from __future__ import annotations

import logging
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any

import httpx

from pkceflow.constants import TOKEN_REQUEST_HEADERS
from pkceflow.models.errors import (
    ConfigurationError,
    PreconditionError,
    TransportError,
)
from pkceflow.models.flow import TokenUrls
from pkceflow.models.tokens import TokenRequestParams

logger = logging.getLogger(__name__)


class TokenExchanger:
    """Redeems an authorization code and code verifier at the token endpoint.

    Uses application/x-www-form-urlencoded encoding as required by OAuth 2.1.
    The request carries no cookies: the code and verifier pair is the only
    proof presented. Failures are raised once and never retried.
    """

    def __init__(self, timeout: float = 30.0):
        """Initialize the token exchanger.

        Args:
            timeout: HTTP request timeout in seconds
        """
        self.timeout = timeout
        # Jar that refuses to store or send cookies for any domain
        no_cookies = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
        self._http_client = httpx.AsyncClient(timeout=timeout, cookies=no_cookies)

    async def exchange_code_for_tokens(
        self, params: TokenRequestParams, urls: TokenUrls
    ) -> dict[str, Any]:
        """Exchange an authorization or interaction code for tokens.

        Args:
            params: Token request parameters
            urls: Endpoints, of which only the token URL is used

        Returns:
            The token endpoint's JSON response, unmodified

        Raises:
            ConfigurationError: If the client id or redirect URI is missing
            PreconditionError: If the code or code verifier is missing
            TransportError: If the request fails or the endpoint rejects it
        """
        validate_token_params(params)
        form_data = params.to_form_data()

        logger.debug(
            f"Exchanging code at {urls.token_url}: "
            f"grant_type={form_data['grant_type']}, "
            f"client_id={form_data['client_id']}"
        )

        try:
            response = await self._http_client.post(
                urls.token_url,
                data=form_data,
                headers=TOKEN_REQUEST_HEADERS,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error during token exchange: {e}") from e

        return self._parse_token_response(response)

    def _parse_token_response(self, response: httpx.Response) -> dict[str, Any]:
        """Return the parsed body of a successful response.

        Raises:
            TransportError: For non-2xx statuses or bodies that are not JSON
        """
        try:
            response_data = response.json()
        except ValueError as e:
            raise TransportError(
                f"Token endpoint returned a non-JSON response ({response.status_code})",
                status_code=response.status_code,
            ) from e

        if 200 <= response.status_code < 300:
            logger.info("Token exchange successful")
            return response_data

        # Error response (RFC 6749 Section 5.2)
        error_code = None
        error_description = None
        if isinstance(response_data, dict):
            error_code = response_data.get("error")
            error_description = response_data.get("error_description")

        logger.warning(
            f"Token exchange failed with {response.status_code}: "
            f"{error_code or 'unknown_error'} - "
            f"{error_description or 'No description provided'}"
        )

        raise TransportError(
            f"Token exchange failed with {response.status_code}: "
            f"{error_code or 'unknown_error'}"
            + (f" ({error_description})" if error_description else ""),
            status_code=response.status_code,
            error=error_code,
            error_description=error_description,
        )

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._http_client.aclose()


def validate_token_params(params: TokenRequestParams) -> None:
    """Check exchange preconditions, reporting only the first failure.

    Raises:
        ConfigurationError: If the client id or redirect URI is missing
        PreconditionError: If the code or code verifier is missing
    """
    if not params.client_id:
        raise ConfigurationError(
            "A clientId must be specified in the client configuration to get a token"
        )

    if not params.redirect_uri:
        raise ConfigurationError(
            "The redirectUri passed to /authorize must also be passed to /token"
        )

    if not params.authorization_code and not params.interaction_code:
        raise PreconditionError(
            "An authorization code (returned from /authorize) must be passed to /token"
        )

    if not params.code_verifier:
        raise PreconditionError(
            'The "codeVerifier" (generated and saved by your app) must be passed '
            "to /token"
        )
