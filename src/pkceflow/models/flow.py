"""Flow state models for PKCE authorization code flows.

Contains the persisted flow record and the result types produced while
saving it across the redirect boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FlowMeta(BaseModel):
    """Flow state persisted while the user is away at the authorization server.

    Holds the code verifier plus any caller-supplied flow parameters. Stored
    with the camelCase ``codeVerifier`` key so records written by other
    clients sharing the same storage stay readable.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    code_verifier: str = Field(
        min_length=1,
        validation_alias=AliasChoices("codeVerifier", "code_verifier"),
        serialization_alias="codeVerifier",
    )

    @property
    def flow_params(self) -> dict[str, Any]:
        """Caller-supplied parameters saved alongside the verifier."""
        return dict(self.model_extra or {})

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_storage(cls, record: dict[str, Any]) -> FlowMeta | None:
        """Build from a raw storage record, or None if it holds no verifier."""
        if not has_code_verifier(record):
            return None
        return cls.model_validate(record)


def has_code_verifier(record: dict[str, Any] | None) -> bool:
    if not record:
        return False
    return bool(record.get("codeVerifier") or record.get("code_verifier"))


@dataclass(frozen=True)
class MetaSaveResult:
    """Outcome of saving flow state.

    ``existing_tiers`` names every storage tier that already held a code
    verifier when the save started, which means another flow may be running.
    """

    existing_tiers: tuple[str, ...] = ()

    @property
    def hazard_detected(self) -> bool:
        return bool(self.existing_tiers)


@dataclass(frozen=True)
class TokenUrls:
    """Endpoints used when redeeming the authorization code."""

    token_url: str
