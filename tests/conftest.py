"""
Shared test configuration and fixtures.
"""

import os
from unittest.mock import patch

import pytest
from authlib.common.security import generate_token
from fastapi.testclient import TestClient

# Environment must be in place before the app (and its config cache) loads
with patch.dict(
    os.environ,
    {
        "SESSION_SECRET_KEY": "test-secret",
        "BASE_URL": "http://testserver",
        "ADMIN_TOKEN": "test-admin-token",
    },
):
    from social_auth_yelp.main import app

from social_auth_yelp.network.registry import NetworkDefinition, NetworkRegistry
from social_auth_yelp.oauth.client import YelpUser
from social_auth_yelp.oauth.config import PLUGIN_ID, OAuthConfig
from social_auth_yelp.oauth.dependencies import get_registry
from social_auth_yelp.oauth.exceptions import (
    ExtraDetailsError,
    TokenExchangeFailure,
)
from social_auth_yelp.settings.models import SETTINGS_CONFIG_ID, YelpAuthSettings
from social_auth_yelp.settings.repository import (
    InMemorySettingsRepository,
    reset_settings_repository,
    set_settings_repository,
)
from social_auth_yelp.users.repository import (
    InMemoryUserRepository,
    reset_user_repository,
    set_user_repository,
)


# ============================================================================
# Fake Yelp SDK
# ============================================================================


class FakeYelpClient:
    """Stands in for YelpOAuthClient in endpoint tests."""

    def __init__(self, profile=None, extras=None, good_code="good-code"):
        self.profile = profile
        self.extras = extras or {}
        self.good_code = good_code
        self._state = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    def get_authorization_url(self, scopes=None):
        self._state = generate_token(32)
        return (
            "https://biz.yelp.com/oauth2/authorize?response_type=code"
            f"&client_id=abc&scope=email&state={self._state}"
        )

    def get_state(self):
        return self._state

    async def exchange_code(self, code):
        if code != self.good_code:
            raise TokenExchangeFailure("invalid_grant")
        return {"access_token": "tok-1", "token_type": "Bearer"}

    async def fetch_resource_owner(self, token):
        return self.profile

    async def get_extra_details(self, url, token):
        if url not in self.extras:
            raise ExtraDetailsError(url, "unreachable")
        return self.extras[url]


class FakeNetwork:
    def __init__(self, sdk):
        self._sdk = sdk

    def get_sdk(self):
        return self._sdk


@pytest.fixture
def yelp_profile():
    return YelpUser(id="U1", first_name="Ann", email="a@b.com")


@pytest.fixture
def fake_sdk(yelp_profile):
    """
    Replace the Yelp plugin with a FakeYelpClient for endpoint tests.

    Set fake_sdk.profile / fake_sdk.extras to shape the callback.
    """
    sdk = FakeYelpClient(profile=yelp_profile)
    registry = NetworkRegistry()
    registry.register(
        NetworkDefinition(
            id=PLUGIN_ID,
            social_network="Yelp",
            type="social_auth",
            settings_config_id=SETTINGS_CONFIG_ID,
            factory=lambda **kwargs: FakeNetwork(
                sdk if kwargs["settings"].is_configured() else None
            ),
        )
    )
    app.dependency_overrides[get_registry] = lambda: registry
    yield sdk
    app.dependency_overrides.pop(get_registry, None)


# ============================================================================
# Stores
# ============================================================================


@pytest.fixture
def yelp_settings():
    return YelpAuthSettings(client_id="abc", client_secret="xyz", scopes="email")


@pytest.fixture
def settings_repository(yelp_settings):
    return InMemorySettingsRepository(yelp_settings)


@pytest.fixture
def user_repository():
    return InMemoryUserRepository()


@pytest.fixture
def oauth_config():
    return OAuthConfig(base_url="http://testserver", admin_token="test-admin-token")


@pytest.fixture
def client():
    """Test client with a fresh cookie jar (and session) per test."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def install_repositories(settings_repository, user_repository):
    """
    Give every test fresh settings and user stores.

    The app resolves both through their singletons, so endpoint tests see
    the same instances as the fixtures.
    """
    set_settings_repository(settings_repository)
    set_user_repository(user_repository)
    yield
    reset_settings_repository()
    reset_user_repository()
