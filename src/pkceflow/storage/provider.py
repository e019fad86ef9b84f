"""Resolution of the storage tier that holds PKCE flow state."""

from __future__ import annotations

from pkceflow.config import StorageOptions
from pkceflow.storage.backends import JSONFileStorage, MemoryStorage, StorageBackend

DURABLE_TIER = "durable"
SESSION_TIER = "session"

# Session tier records shared by every provider in the process
_SESSION_STORE: dict[str, dict] = {}


class PKCEStorageProvider:
    """Maps storage options to a concrete backend.

    ``prefer_durable`` selects the durable tier, anything else the session
    tier. Backends may be injected, otherwise a file-backed durable tier and
    an in-memory session tier are built from the options. The default session
    tier is process-wide, so separate clients see the same flow state.
    """

    def __init__(
        self,
        durable: StorageBackend | None = None,
        session: StorageBackend | None = None,
    ):
        self._durable = durable
        self._session = session

    def get_pkce_storage(self, options: StorageOptions) -> StorageBackend:
        if options.prefer_durable:
            if self._durable is not None:
                return self._durable
            return JSONFileStorage(
                options.storage_path, options.storage_key, options.cookies
            )

        if self._session is not None:
            return self._session
        return MemoryStorage(options.storage_key, _SESSION_STORE, options.cookies)

