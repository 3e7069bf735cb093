"""
Unit tests for the Yelp OAuth2 client.
"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from respx import MockRouter

from social_auth_yelp.oauth.client import YelpOAuthClient, YelpUser
from social_auth_yelp.oauth.config import (
    OAuthConfig,
    YELP_TOKEN_URL,
    YELP_USER_INFO_URL,
)
from social_auth_yelp.oauth.exceptions import (
    ExtraDetailsError,
    ProfileFetchFailure,
    TokenExchangeFailure,
)


REDIRECT_URI = "http://testserver/user/login/yelp/callback"
TOKEN = {"access_token": "tok-1", "token_type": "Bearer"}


@pytest.fixture
def yelp_client():
    return YelpOAuthClient(
        client_id="abc",
        client_secret="xyz",
        redirect_uri=REDIRECT_URI,
        scopes=["email"],
        config=OAuthConfig(base_url="http://testserver"),
    )


class TestAuthorizationUrl:
    """Authorization URL and state generation (no network)."""

    def test_url_embeds_client_scope_state(self, yelp_client):
        url = yelp_client.get_authorization_url()
        state = yelp_client.get_state()

        parsed = urlparse(url)
        query = parse_qs(parsed.query)

        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == (
            "https://biz.yelp.com/oauth2/authorize"
        )
        assert query["response_type"] == ["code"]
        assert query["client_id"] == ["abc"]
        assert query["redirect_uri"] == [REDIRECT_URI]
        assert query["scope"] == ["email"]
        assert query["state"] == [state]
        assert len(state) == 32

    def test_new_state_per_url(self, yelp_client):
        yelp_client.get_authorization_url()
        first = yelp_client.get_state()
        yelp_client.get_authorization_url()
        second = yelp_client.get_state()

        assert first != second

    def test_scopes_override(self, yelp_client):
        url = yelp_client.get_authorization_url(scopes=["email", "business"])

        assert parse_qs(urlparse(url).query)["scope"] == ["email business"]

    def test_get_state_is_stable_between_urls(self, yelp_client):
        assert yelp_client.get_state() == yelp_client.get_state()

    def test_proxy_configuration_keeps_credentials(self):
        config = OAuthConfig(http_proxy="http://proxy.internal:3128")

        client = YelpOAuthClient("abc", "xyz", REDIRECT_URI, config=config)

        assert client.client_id == "abc"
        assert client.redirect_uri == REDIRECT_URI


class TestExchangeCode:
    """Authorization code exchange."""

    @pytest.mark.asyncio
    async def test_exchange_success(self, yelp_client, respx_mock: MockRouter):
        route = respx_mock.post(YELP_TOKEN_URL).mock(
            return_value=httpx.Response(
                200,
                json={"access_token": "tok-1", "token_type": "Bearer", "expires_in": 3600},
            )
        )

        async with yelp_client:
            token = await yelp_client.exchange_code("good-code")

        assert token["access_token"] == "tok-1"
        body = parse_qs(route.calls.last.request.content.decode())
        assert body["grant_type"] == ["authorization_code"]
        assert body["code"] == ["good-code"]
        assert body["redirect_uri"] == [REDIRECT_URI]
        assert body["client_id"][0] == "abc"
        assert body["client_secret"][0] == "xyz"

    @pytest.mark.asyncio
    async def test_exchange_provider_error(self, yelp_client, respx_mock: MockRouter):
        respx_mock.post(YELP_TOKEN_URL).mock(
            return_value=httpx.Response(400, json={"error": "invalid_grant"})
        )

        with pytest.raises(TokenExchangeFailure):
            await yelp_client.exchange_code("bad-code")

    @pytest.mark.asyncio
    async def test_exchange_server_error(self, yelp_client, respx_mock: MockRouter):
        respx_mock.post(YELP_TOKEN_URL).mock(return_value=httpx.Response(503))

        with pytest.raises(TokenExchangeFailure):
            await yelp_client.exchange_code("good-code")

    @pytest.mark.asyncio
    async def test_exchange_network_error(self, yelp_client, respx_mock: MockRouter):
        respx_mock.post(YELP_TOKEN_URL).mock(
            side_effect=httpx.ConnectError("Connection failed")
        )

        with pytest.raises(TokenExchangeFailure):
            await yelp_client.exchange_code("good-code")

    @pytest.mark.asyncio
    async def test_exchange_without_access_token(
        self, yelp_client, respx_mock: MockRouter
    ):
        respx_mock.post(YELP_TOKEN_URL).mock(
            return_value=httpx.Response(200, json={"token_type": "Bearer"})
        )

        with pytest.raises(TokenExchangeFailure):
            await yelp_client.exchange_code("good-code")

    @pytest.mark.asyncio
    async def test_exchange_missing_code(self, yelp_client):
        with pytest.raises(TokenExchangeFailure):
            await yelp_client.exchange_code("")


class TestResourceOwner:
    """Profile retrieval."""

    @pytest.mark.asyncio
    async def test_fetch_profile(self, yelp_client, respx_mock: MockRouter):
        route = respx_mock.get(YELP_USER_INFO_URL).mock(
            return_value=httpx.Response(
                200, json={"id": "U1", "first_name": "Ann", "email": "a@b.com"}
            )
        )

        user = await yelp_client.fetch_resource_owner(TOKEN)

        assert user.id == "U1"
        assert user.first_name == "Ann"
        assert user.email == "a@b.com"
        assert route.calls.last.request.headers["Authorization"] == "Bearer tok-1"

    @pytest.mark.asyncio
    async def test_fetch_profile_empty_body(self, yelp_client, respx_mock: MockRouter):
        respx_mock.get(YELP_USER_INFO_URL).mock(return_value=httpx.Response(200))

        assert await yelp_client.fetch_resource_owner(TOKEN) is None

    @pytest.mark.asyncio
    async def test_fetch_profile_http_error(self, yelp_client, respx_mock: MockRouter):
        respx_mock.get(YELP_USER_INFO_URL).mock(return_value=httpx.Response(401))

        with pytest.raises(ProfileFetchFailure):
            await yelp_client.fetch_resource_owner(TOKEN)

    @pytest.mark.asyncio
    async def test_fetch_profile_malformed(self, yelp_client, respx_mock: MockRouter):
        respx_mock.get(YELP_USER_INFO_URL).mock(
            return_value=httpx.Response(200, text="<html>")
        )

        with pytest.raises(ProfileFetchFailure):
            await yelp_client.fetch_resource_owner(TOKEN)


class TestExtraDetails:
    """Authenticated requests to configured extra endpoints."""

    URL = "https://api.yelp.com/v3/businesses/abc"

    @pytest.mark.asyncio
    async def test_fetch_authenticated_returns_body(
        self, yelp_client, respx_mock: MockRouter
    ):
        route = respx_mock.get(self.URL).mock(
            return_value=httpx.Response(200, text='{"id": "abc"}')
        )

        body = await yelp_client.fetch_authenticated(self.URL, TOKEN)

        assert body == '{"id": "abc"}'
        assert route.calls.last.request.headers["Authorization"] == "Bearer tok-1"

    @pytest.mark.asyncio
    async def test_get_extra_details_decodes(self, yelp_client, respx_mock: MockRouter):
        respx_mock.get(self.URL).mock(
            return_value=httpx.Response(200, json={"id": "abc", "rating": 4.5})
        )

        assert await yelp_client.get_extra_details(self.URL, TOKEN) == {
            "id": "abc",
            "rating": 4.5,
        }

    @pytest.mark.asyncio
    async def test_http_error_kind(self, yelp_client, respx_mock: MockRouter):
        respx_mock.get(self.URL).mock(return_value=httpx.Response(404))

        with pytest.raises(ExtraDetailsError) as exc_info:
            await yelp_client.get_extra_details(self.URL, TOKEN)

        assert exc_info.value.kind == "http_error"
        assert exc_info.value.url == self.URL

    @pytest.mark.asyncio
    async def test_unreachable_kind(self, yelp_client, respx_mock: MockRouter):
        respx_mock.get(self.URL).mock(side_effect=httpx.ConnectError("down"))

        with pytest.raises(ExtraDetailsError) as exc_info:
            await yelp_client.get_extra_details(self.URL, TOKEN)

        assert exc_info.value.kind == "unreachable"

    @pytest.mark.asyncio
    async def test_malformed_json_kind(self, yelp_client, respx_mock: MockRouter):
        respx_mock.get(self.URL).mock(return_value=httpx.Response(200, text="not json"))

        with pytest.raises(ExtraDetailsError) as exc_info:
            await yelp_client.get_extra_details(self.URL, TOKEN)

        assert exc_info.value.kind == "malformed_json"


class TestYelpUser:
    """Profile payload parsing."""

    def test_from_nested_payload(self):
        user = YelpUser.from_payload(
            {"user": {"user_id": 42, "name": "Ann Lee", "image_url": "https://img"}}
        )

        assert user.id == "42"
        assert user.first_name == "Ann"
        assert user.last_name == "Lee"
        assert user.email is None
        assert user.photo_url == "https://img"

    def test_without_id(self):
        assert YelpUser.from_payload({"first_name": "Ann"}) is None

    def test_empty(self):
        assert YelpUser.from_payload({}) is None
        assert YelpUser.from_payload([]) is None
