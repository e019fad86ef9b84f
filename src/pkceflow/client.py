"""PKCE client tying configuration, flow state and token exchange together.

Covers the two halves of a flow around the browser redirect: preparing the
verifier and challenge before leaving, and redeeming the code on return.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pkceflow.config import PKCEClientConfig
from pkceflow.constants import DEFAULT_CODE_CHALLENGE_METHOD
from pkceflow.models.errors import PKCEError
from pkceflow.models.flow import FlowMeta, MetaSaveResult, TokenUrls
from pkceflow.models.tokens import TokenRequestParams
from pkceflow.primitives.pkce import compute_challenge, generate_verifier
from pkceflow.services.meta import PKCEMetaStore
from pkceflow.services.tokens import TokenExchanger, validate_token_params
from pkceflow.storage.provider import PKCEStorageProvider

logger = logging.getLogger(__name__)

RESERVED_FLOW_PARAMS = frozenset({"codeVerifier", "code_verifier"})


@dataclass(frozen=True)
class PKCEFlowStart:
    """Values needed to build the authorize request for a new flow."""

    code_verifier: str
    code_challenge: str
    code_challenge_method: str
    save_result: MetaSaveResult


class PKCEClient:
    """Client for one PKCE authorization code flow at a time.

    Example:
        async with PKCEClient(config) as client:
            start = await client.prepare_flow()
            # redirect with start.code_challenge, then on callback:
            tokens = await client.complete_flow(authorization_code=code)
    """

    def __init__(
        self,
        config: PKCEClientConfig,
        storage_provider: PKCEStorageProvider | None = None,
        strict: bool = False,
    ):
        self.config = config
        self.meta_store = PKCEMetaStore(config.storage, storage_provider, strict)
        self.token_exchanger = TokenExchanger(timeout=config.timeout)

    @property
    def urls(self) -> TokenUrls:
        return TokenUrls(token_url=self.config.token_url)

    async def prepare_flow(self, **flow_params: Any) -> PKCEFlowStart:
        """Start a flow by generating and saving a new code verifier.

        Args:
            **flow_params: Extra parameters saved with the verifier

        Returns:
            PKCEFlowStart with the challenge to send to /authorize

        Raises:
            PKCEError: If ``flow_params`` tries to set the code verifier
        """
        reserved = RESERVED_FLOW_PARAMS.intersection(flow_params)
        if reserved:
            raise PKCEError(
                "The code verifier is generated by the client and cannot be "
                f"passed as a flow parameter: {', '.join(sorted(reserved))}"
            )

        if self.config.redirect_uri and "redirect_uri" not in flow_params:
            flow_params["redirect_uri"] = self.config.redirect_uri

        code_verifier = generate_verifier()
        code_challenge = await compute_challenge(code_verifier)
        save_result = self.meta_store.save(
            FlowMeta(code_verifier=code_verifier, **flow_params)
        )

        logger.info(f"Prepared PKCE flow for client {self.config.client_id}")

        return PKCEFlowStart(
            code_verifier=code_verifier,
            code_challenge=code_challenge,
            code_challenge_method=DEFAULT_CODE_CHALLENGE_METHOD,
            save_result=save_result,
        )

    async def complete_flow(
        self,
        authorization_code: str | None = None,
        interaction_code: str | None = None,
    ) -> dict[str, Any]:
        """Redeem the code returned to the redirect URI.

        Once a request has been attempted, flow state is cleared even when the
        exchange fails, since a code can only be redeemed once. Invalid
        parameters are rejected before that point and leave the state alone.

        Raises:
            StateNotFoundError: If no flow state is stored
            ConfigurationError: If the client id or redirect URI is missing
            PreconditionError: If no code was given
            TransportError: If the token request fails
        """
        meta = self.meta_store.load()
        redirect_uri = meta.flow_params.get("redirect_uri") or self.config.redirect_uri

        params = TokenRequestParams(
            client_id=self.config.client_id,
            redirect_uri=redirect_uri,
            authorization_code=authorization_code,
            interaction_code=interaction_code,
            code_verifier=meta.code_verifier,
        )

        validate_token_params(params)

        try:
            return await self.token_exchanger.exchange_code_for_tokens(
                params, self.urls
            )
        finally:
            self.meta_store.clear()

    async def aclose(self) -> None:
        await self.token_exchanger.close()

    async def __aenter__(self) -> PKCEClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
