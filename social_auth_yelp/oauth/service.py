"""
Yelp login flow.

YelpLoginService starts a login (authorization redirect with anti-forgery
state) and processes the callback (state check, code exchange, profile and
extra details). Creating or logging in the local account is left to the
user manager.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from social_auth_yelp.network.registry import NetworkRegistry
from social_auth_yelp.oauth.client import YelpOAuthClient
from social_auth_yelp.oauth.config import PLUGIN_ID, OAuthConfig
from social_auth_yelp.oauth.exceptions import (
    ConfigurationError,
    ExtraDetailsError,
    FailureReason,
    InvalidState,
    ProfileFetchFailure,
    SocialAuthError,
    TokenExchangeFailure,
    UserCancelled,
)
from social_auth_yelp.oauth.models import AuthenticatedIdentity, LoginFailure
from social_auth_yelp.oauth.session import LoginSession
from social_auth_yelp.settings.models import YelpAuthSettings
from social_auth_yelp.settings.repository import SettingsRepository


logger = logging.getLogger(__name__)


NOT_CONFIGURED_MESSAGE = (
    "Social Auth Yelp not configured properly. Contact site administrator."
)
CANCELLED_MESSAGE = "You could not be authenticated."
GENERIC_FAILURE_MESSAGE = "Yelp login failed. Please try again."

FAILURE_MESSAGES = {
    FailureReason.CONFIGURATION_ERROR: NOT_CONFIGURED_MESSAGE,
    FailureReason.USER_CANCELLED: CANCELLED_MESSAGE,
}

# Cancellation is the user's choice, not an error
_LOG_LEVELS = {
    FailureReason.USER_CANCELLED: logging.INFO,
    FailureReason.INVALID_STATE: logging.WARNING,
}


class IdentityLookup(Protocol):
    """The part of the user manager the callback needs."""

    async def user_exists(self, provider_user_id: str) -> bool: ...


class YelpLoginService:
    """Login initiator and callback handler for Yelp."""

    def __init__(
        self,
        settings_repository: SettingsRepository,
        registry: NetworkRegistry,
        user_manager: IdentityLookup,
        config: OAuthConfig,
        plugin_id: str = PLUGIN_ID,
    ):
        self._settings_repository = settings_repository
        self._registry = registry
        self._user_manager = user_manager
        self._config = config
        self._plugin_id = plugin_id

    async def _load_sdk(
        self, base_url: str
    ) -> tuple[YelpOAuthClient | None, YelpAuthSettings]:
        settings = await self._settings_repository.get()
        network = self._registry.create_instance(
            self._plugin_id, settings=settings, config=self._config, base_url=base_url
        )
        return network.get_sdk(), settings

    async def begin_login(
        self, session: LoginSession, base_url: str, destination: str | None = None
    ) -> str:
        """
        Start a Yelp login.

        Stores the destination (if any) and a fresh anti-forgery state in the
        session, then returns the Yelp authorization URL.

        Args:
            session: Session of the current request
            base_url: Site base URL used to build the redirect URI
            destination: Optional site-relative path to land on after login

        Returns:
            Authorization URL to redirect the user agent to

        Raises:
            ConfigurationError: If client id or client secret are missing
        """
        sdk, _ = await self._load_sdk(base_url)
        if sdk is None:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)

        async with sdk:
            if destination:
                session.set_destination(destination)

            login_url = sdk.get_authorization_url()
            session.set_state(sdk.get_state())

        logger.info(
            "Redirecting user to Yelp for authentication",
            extra={"provider": self._plugin_id},
        )
        return login_url

    async def handle_callback(
        self, session: LoginSession, base_url: str, params: Mapping[str, str]
    ) -> AuthenticatedIdentity | LoginFailure:
        """
        Process the redirect back from Yelp.

        Never raises: every failure clears the session's state and token and
        comes back as a LoginFailure.

        Args:
            session: Session of the current request
            base_url: Site base URL used to build the redirect URI
            params: Callback query parameters (code, state, error)

        Returns:
            AuthenticatedIdentity on success, LoginFailure otherwise
        """
        try:
            return await self._process_callback(session, base_url, params)
        except SocialAuthError as e:
            return self._fail(session, e.reason, str(e))
        except Exception as e:
            logger.error(
                f"Unexpected error during Yelp callback: {e}",
                exc_info=True,
                extra={"provider": self._plugin_id},
            )
            return self._fail(session, FailureReason.UNEXPECTED_ERROR, type(e).__name__)

    async def _process_callback(
        self, session: LoginSession, base_url: str, params: Mapping[str, str]
    ) -> AuthenticatedIdentity:
        error = params.get("error")
        if error == "access_denied":
            raise UserCancelled("User denied access on Yelp")

        sdk, settings = await self._load_sdk(base_url)
        if sdk is None:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)

        async with sdk:
            if not session.state_matches(params.get("state")):
                raise InvalidState("Returned state is empty or does not match")

            # State is single use
            session.clear(LoginSession.STATE)

            if error:
                raise TokenExchangeFailure(f"Provider returned error: {error}")

            token = await sdk.exchange_code(params.get("code", ""))
            access_token = token["access_token"]
            session.set_access_token(access_token)

            profile = await sdk.fetch_resource_owner(token)
            if profile is None:
                raise ProfileFetchFailure("Yelp returned an empty profile")

            extras: list[Any] = []
            if not await self._user_manager.user_exists(profile.id):
                extras = await self._fetch_extras(sdk, settings.api_call_list(), token)

        logger.info(
            "Yelp callback completed",
            extra={
                "provider": self._plugin_id,
                "provider_user_id": profile.id,
                "extras": len(extras),
            },
        )

        return AuthenticatedIdentity(
            provider_user_id=profile.id,
            first_name=profile.first_name,
            email=profile.email,
            access_token=access_token,
            extras_json=json.dumps(extras),
        )

    async def _fetch_extras(
        self, sdk: YelpOAuthClient, urls: list[str], token: dict[str, Any]
    ) -> list[Any]:
        """Call each configured endpoint in order; failed ones are left out."""
        extras: list[Any] = []
        for url in urls:
            try:
                extras.append(await sdk.get_extra_details(url, token))
            except ExtraDetailsError as e:
                logger.warning(
                    f"Skipping extra API call ({e.kind})",
                    extra={"provider": self._plugin_id, "url": e.url, "kind": e.kind},
                )
        return extras

    def _fail(
        self, session: LoginSession, reason: FailureReason, detail: str
    ) -> LoginFailure:
        session.nullify()
        logger.log(
            _LOG_LEVELS.get(reason, logging.ERROR),
            f"Yelp login failed: {reason.value}",
            extra={"provider": self._plugin_id, "reason": reason.value, "detail": detail},
        )
        return LoginFailure(
            reason=reason,
            message=FAILURE_MESSAGES.get(reason, GENERIC_FAILURE_MESSAGE),
        )
