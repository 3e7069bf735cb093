"""
Yelp OAuth2 client.

Thin wrapper around authlib's AsyncOAuth2Client. authlib owns the protocol
(authorization URL, code exchange, bearer requests); this module only
supplies credentials, endpoints and transport options, and maps failures
onto the login flow's exceptions.
"""

import json
import logging
from typing import Any

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.common.security import generate_token
from authlib.integrations.httpx_client import AsyncOAuth2Client
from pydantic import BaseModel, ConfigDict, Field

from social_auth_yelp.oauth.config import OAuthConfig
from social_auth_yelp.oauth.exceptions import (
    ExtraDetailsError,
    ProfileFetchFailure,
    TokenExchangeFailure,
)


logger = logging.getLogger(__name__)


class YelpUser(BaseModel):
    """Resource owner returned by Yelp for the authenticated user."""

    id: str = Field(description="Yelp user ID")
    first_name: str | None = Field(default=None, description="Given name")
    last_name: str | None = Field(default=None, description="Family name")
    email: str | None = Field(
        default=None, description="Email address (Yelp may withhold it)"
    )
    photo_url: str | None = Field(default=None, description="Profile photo URL")
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_payload(cls, payload: Any) -> "YelpUser | None":
        """
        Build a YelpUser from the user info response.

        Accepts the profile either at the top level or nested under "user".
        Returns None when the payload carries no user id.
        """
        if not isinstance(payload, dict) or not payload:
            return None

        data = payload.get("user") if isinstance(payload.get("user"), dict) else payload
        user_id = data.get("id") or data.get("user_id")
        if not user_id:
            return None

        first_name = data.get("first_name")
        last_name = data.get("last_name")
        if not first_name and data.get("name"):
            parts = str(data["name"]).split(" ", 1)
            first_name = parts[0]
            if len(parts) > 1 and not last_name:
                last_name = parts[1]

        return cls(
            id=str(user_id),
            first_name=first_name,
            last_name=last_name,
            email=data.get("email") or None,
            photo_url=data.get("photo_url") or data.get("image_url"),
            raw=payload,
        )


class YelpOAuthClient:
    """
    OAuth2 client adapter for Yelp.

    Use as an async context manager so the underlying HTTP client is closed.
    """

    STATE_LENGTH = 32

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: list[str] | None = None,
        config: OAuthConfig | None = None,
    ):
        self._config = config or OAuthConfig()
        self._scopes = list(scopes or [])
        self._state: str | None = None

        client_kwargs: dict[str, Any] = {"timeout": self._config.http_timeout}
        # Outbound proxy from host-wide network configuration
        if self._config.http_proxy:
            client_kwargs["proxy"] = self._config.http_proxy

        self._client = AsyncOAuth2Client(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            scope=self._scopes or None,
            token_endpoint_auth_method="client_secret_post",
            **client_kwargs,
        )

    async def __aenter__(self) -> "YelpOAuthClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def client_id(self) -> str:
        return self._client.client_id

    @property
    def redirect_uri(self) -> str:
        return self._client.redirect_uri

    @property
    def scopes(self) -> list[str]:
        return list(self._scopes)

    def get_state(self) -> str:
        """
        Anti-forgery state for the current authorization URL.

        A fresh value is minted each time get_authorization_url() is called.
        """
        if self._state is None:
            self._state = generate_token(self.STATE_LENGTH)
        return self._state

    def get_authorization_url(self, scopes: list[str] | None = None) -> str:
        """
        Build the Yelp authorization URL.

        Local operation, no network call. Embeds client id, redirect URI,
        scopes and a newly minted state.
        """
        self._state = generate_token(self.STATE_LENGTH)
        kwargs: dict[str, Any] = {}
        if scopes is not None:
            kwargs["scope"] = scopes

        url, _ = self._client.create_authorization_url(
            self._config.authorize_url, state=self._state, **kwargs
        )
        return url

    async def exchange_code(self, code: str) -> dict[str, Any]:
        """
        Exchange an authorization code for an access token.

        Raises:
            TokenExchangeFailure: On any protocol, transport or decoding error
        """
        if not code:
            raise TokenExchangeFailure("Missing authorization code")

        try:
            token = await self._client.fetch_token(
                self._config.token_url,
                code=code,
                grant_type="authorization_code",
            )
        except (AuthlibBaseError, httpx.HTTPError, ValueError) as e:
            logger.error(
                f"Yelp token exchange failed: {type(e).__name__}",
                extra={"provider": "yelp"},
            )
            raise TokenExchangeFailure(str(e)) from e

        if not token or not token.get("access_token"):
            raise TokenExchangeFailure("Token response did not contain an access token")

        return dict(token)

    async def _get(self, url: str, token: dict[str, Any]) -> httpx.Response:
        self._client.token = token
        response = await self._client.get(url)
        response.raise_for_status()
        return response

    async def fetch_resource_owner(self, token: dict[str, Any]) -> YelpUser | None:
        """
        Load the authenticated user's profile.

        Returns None when Yelp answers with an empty profile.

        Raises:
            ProfileFetchFailure: On transport errors or undecodable responses
        """
        try:
            response = await self._get(self._config.user_info_url, token)
            if not response.content:
                return None
            payload = response.json()
        except (AuthlibBaseError, httpx.HTTPError, ValueError) as e:
            logger.error(
                f"Yelp profile request failed: {type(e).__name__}",
                extra={"provider": "yelp"},
            )
            raise ProfileFetchFailure(str(e)) from e

        return YelpUser.from_payload(payload)

    async def fetch_authenticated(self, url: str, token: dict[str, Any]) -> str:
        """
        GET an arbitrary Yelp API URL with the bearer token.

        Returns:
            Raw response body

        Raises:
            ExtraDetailsError: If the endpoint is unreachable or answers with an error
        """
        try:
            response = await self._get(url, token)
        except httpx.HTTPStatusError as e:
            raise ExtraDetailsError(
                url, "http_error", f"status={e.response.status_code}"
            ) from e
        except (AuthlibBaseError, httpx.RequestError) as e:
            raise ExtraDetailsError(url, "unreachable", type(e).__name__) from e
        return response.text

    async def get_extra_details(self, url: str, token: dict[str, Any]) -> Any:
        """Fetch one extra API endpoint and decode its JSON body."""
        body = await self.fetch_authenticated(url, token)
        try:
            return json.loads(body)
        except ValueError as e:
            raise ExtraDetailsError(url, "malformed_json") from e
