import pytest

from pkceflow.config import PKCEClientConfig
from pkceflow.storage import provider
from pkceflow.storage.backends import MemoryStorage
from pkceflow.storage.provider import PKCEStorageProvider


class TwoTierStorage:
    """Independent in-memory durable and session tiers for a test."""

    def __init__(self):
        self.durable = MemoryStorage("pkce-flow-storage")
        self.session = MemoryStorage("pkce-flow-storage")
        self.provider = PKCEStorageProvider(durable=self.durable, session=self.session)


@pytest.fixture(autouse=True)
def reset_session_store():
    provider._SESSION_STORE.clear()
    yield
    provider._SESSION_STORE.clear()


@pytest.fixture
def tiers() -> TwoTierStorage:
    return TwoTierStorage()


@pytest.fixture
def client_config() -> PKCEClientConfig:
    return PKCEClientConfig(
        client_id="abc",
        redirect_uri="https://app.example.com/cb",
        token_url="https://auth.example.com/oauth2/v1/token",
    )
