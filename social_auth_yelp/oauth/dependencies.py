"""
FastAPI dependencies for the Yelp login endpoints.

Provides the per-request session wrapper, the resolved site base URL and
the wired login service.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from social_auth_yelp.network.registry import NetworkRegistry, get_network_registry
from social_auth_yelp.oauth.config import OAuthConfig, get_oauth_config
from social_auth_yelp.oauth.service import YelpLoginService
from social_auth_yelp.oauth.session import LoginSession
from social_auth_yelp.settings.dependencies import SettingsStore
from social_auth_yelp.users.dependencies import UserManager


logger = logging.getLogger(__name__)


def get_login_session(request: Request) -> LoginSession:
    """Wrap the Starlette session of the current request."""
    return LoginSession(request.session)


def get_base_url(
    request: Request,
    config: Annotated[OAuthConfig, Depends(get_oauth_config)],
) -> str:
    """Site base URL: BASE_URL if set, else the request's own base URL."""
    return config.resolve_base_url(str(request.base_url))


def get_registry() -> NetworkRegistry:
    """Provide NetworkRegistry dependency."""
    return get_network_registry()


def get_login_service(
    settings_repository: SettingsStore,
    registry: Annotated[NetworkRegistry, Depends(get_registry)],
    user_manager: UserManager,
    config: Annotated[OAuthConfig, Depends(get_oauth_config)],
) -> YelpLoginService:
    """
    Provide YelpLoginService dependency.

    This is where the login flow is wired to its settings store, plugin
    registry and user manager.
    """
    return YelpLoginService(
        settings_repository=settings_repository,
        registry=registry,
        user_manager=user_manager,
        config=config,
    )


# Type aliases for cleaner dependency injection
Session = Annotated[LoginSession, Depends(get_login_session)]
BaseUrl = Annotated[str, Depends(get_base_url)]
Registry = Annotated[NetworkRegistry, Depends(get_registry)]
LoginService = Annotated[YelpLoginService, Depends(get_login_service)]
