"""Token request models for PKCE code exchange."""

from __future__ import annotations

from dataclasses import dataclass

from pkceflow.constants import (
    GRANT_TYPE_AUTHORIZATION_CODE,
    GRANT_TYPE_INTERACTION_CODE,
)


@dataclass(frozen=True)
class TokenRequestParams:
    """Parameters for exchanging a code for tokens (RFC 6749 Section 4.1.3).

    Every field is optional at construction; the token exchanger validates
    them before any request is sent. Includes the PKCE code_verifier
    (RFC 7636) and the interaction code used by embedded sign-in flows.
    """

    client_id: str | None = None
    redirect_uri: str | None = None
    authorization_code: str | None = None
    interaction_code: str | None = None
    code_verifier: str | None = None

    @property
    def grant_type(self) -> str:
        if self.interaction_code:
            return GRANT_TYPE_INTERACTION_CODE
        return GRANT_TYPE_AUTHORIZATION_CODE

    def to_form_data(self) -> dict[str, str]:
        """Convert to form data for application/x-www-form-urlencoded request.

        Unset values are left out entirely rather than sent as empty strings.
        The interaction code takes precedence when both codes are present.

        Returns:
            Dictionary suitable for httpx data parameter
        """
        data = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "grant_type": self.grant_type,
        }

        if self.interaction_code:
            data["interaction_code"] = self.interaction_code
        elif self.authorization_code:
            data["code"] = self.authorization_code

        data["code_verifier"] = self.code_verifier

        return {key: value for key, value in data.items() if value}
