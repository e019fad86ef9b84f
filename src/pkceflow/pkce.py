"""Module-level PKCE operations.

Thin functions over a ``PKCEClient`` for callers that drive the flow
themselves rather than through ``prepare_flow``/``complete_flow``.
"""

from __future__ import annotations

from typing import Any

from pkceflow.client import PKCEClient
from pkceflow.constants import DEFAULT_CODE_CHALLENGE_METHOD
from pkceflow.models.flow import FlowMeta, MetaSaveResult, TokenUrls
from pkceflow.models.tokens import TokenRequestParams
from pkceflow.primitives.pkce import compute_challenge, generate_verifier

__all__ = [
    "DEFAULT_CODE_CHALLENGE_METHOD",
    "clear_meta",
    "compute_challenge",
    "exchange_code_for_tokens",
    "generate_verifier",
    "load_meta",
    "save_meta",
]


def save_meta(client: PKCEClient, meta: FlowMeta | dict[str, Any]) -> MetaSaveResult:
    """Save flow state. Warns, but does not raise, if a flow is in progress."""
    if not isinstance(meta, FlowMeta):
        meta = FlowMeta.model_validate(meta)
    return client.meta_store.save(meta)


def load_meta(client: PKCEClient) -> FlowMeta:
    """Load flow state, raising StateNotFoundError if none is stored."""
    return client.meta_store.load()


def clear_meta(client: PKCEClient) -> None:
    client.meta_store.clear()


async def exchange_code_for_tokens(
    client: PKCEClient, params: TokenRequestParams, urls: TokenUrls | None = None
) -> dict[str, Any]:
    """Redeem a code and verifier, defaulting to the client's token URL."""
    return await client.token_exchanger.exchange_code_for_tokens(
        params, urls or client.urls
    )
