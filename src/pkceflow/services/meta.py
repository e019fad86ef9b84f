"""PKCE flow state persistence across the authorization redirect.

Flow state is read from an ordered list of storage tiers and written to a
single tier. The durable tier is read first so records left by older
clients are still honoured; new flows are always written to the session
tier.
"""

from __future__ import annotations

import logging
from typing import Any

from pkceflow.config import StorageOptions
from pkceflow.models.errors import FlowInProgressError, StateNotFoundError
from pkceflow.models.flow import FlowMeta, MetaSaveResult, has_code_verifier
from pkceflow.storage.backends import StorageBackend
from pkceflow.storage.provider import (
    DURABLE_TIER,
    SESSION_TIER,
    PKCEStorageProvider,
)

logger = logging.getLogger(__name__)

DURABLE_OVERRIDES = {"prefer_durable": True}
SESSION_OVERRIDES = {"prefer_durable": False}


class PKCEMetaStore:
    """Saves, loads and clears the state of the in-flight PKCE flow.

    Only one flow should be in progress at a time, but nothing here locks
    the storage tiers. Two overlapping flows can interleave their reads and
    writes: one flow's ``load`` may then fail with ``StateNotFoundError`` or
    return the other flow's record. ``save`` detects an existing verifier
    and reports it (a warning plus ``MetaSaveResult``) instead of refusing,
    since a flow restarted after a failed navigation legitimately finds its
    own stale record. Pass ``strict=True`` to raise ``FlowInProgressError``
    instead.
    """

    def __init__(
        self,
        options: StorageOptions | None = None,
        provider: PKCEStorageProvider | None = None,
        strict: bool = False,
    ):
        self.options = options or StorageOptions()
        self.provider = provider or PKCEStorageProvider()
        self.strict = strict

        # Read order, then the single write tier
        self.read_tiers: tuple[tuple[str, dict[str, Any]], ...] = (
            (DURABLE_TIER, DURABLE_OVERRIDES),
            (SESSION_TIER, SESSION_OVERRIDES),
        )
        self.write_tier: tuple[str, dict[str, Any]] = (
            SESSION_TIER,
            SESSION_OVERRIDES,
        )

    def get_storage(self, overrides: dict[str, Any] | None = None) -> StorageBackend:
        """Resolve the backend for the configured options plus ``overrides``."""
        return self.provider.get_pkce_storage(self.options.merged(overrides))

    def save(self, meta: FlowMeta) -> MetaSaveResult:
        """Persist flow state, replacing any record in every tier.

        Args:
            meta: Flow state to persist

        Returns:
            MetaSaveResult naming the tiers that already held a verifier

        Raises:
            FlowInProgressError: In strict mode, if a verifier is already stored
        """
        existing = []
        for name, overrides in self.read_tiers:
            if has_code_verifier(self.get_storage(overrides).get_storage()):
                logger.warning(
                    f"saveMeta: PKCE codeVerifier exists in {name} storage. "
                    "This may indicate an auth flow is already in progress."
                )
                existing.append(name)

        result = MetaSaveResult(existing_tiers=tuple(existing))

        if self.strict and result.hazard_detected:
            raise FlowInProgressError(
                "A PKCE codeVerifier is already stored in "
                f"{', '.join(result.existing_tiers)} storage"
            )

        self.clear()

        name, overrides = self.write_tier
        self.get_storage(overrides).set_storage(meta.to_storage())
        logger.debug(f"Saved PKCE flow state to {name} storage")

        return result

    def load(self) -> FlowMeta:
        """Load the state of the in-flight flow.

        Returns:
            FlowMeta from the first tier that holds a code verifier

        Raises:
            StateNotFoundError: If no tier holds a code verifier
        """
        for name, overrides in self.read_tiers:
            meta = FlowMeta.from_storage(self.get_storage(overrides).get_storage())
            if meta is not None:
                logger.debug(f"Loaded PKCE flow state from {name} storage")
                return meta

        raise StateNotFoundError(
            "Could not load PKCE codeVerifier from storage. This may indicate "
            "the auth flow has already completed or multiple auth flows are "
            "executing concurrently."
        )

    def clear(self) -> None:
        """Clear flow state from every tier, session tier first."""
        for _, overrides in reversed(self.read_tiers):
            self.get_storage(overrides).clear_storage()
