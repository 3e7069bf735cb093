"""
OAuth2 configuration for Yelp login.

Site-wide settings loaded from environment variables: base URL, provider
endpoints and outbound network options. Client credentials are not read
here; they live in the settings store (see social_auth_yelp.settings).
"""

import os
import logging
from dataclasses import dataclass
from functools import lru_cache


logger = logging.getLogger(__name__)


PLUGIN_ID = "social_auth_yelp"

CALLBACK_PATH = "/user/login/yelp/callback"

# Yelp OAuth2 endpoints
YELP_AUTHORIZE_URL = "https://biz.yelp.com/oauth2/authorize"
YELP_TOKEN_URL = "https://api.yelp.com/oauth2/token"
YELP_USER_INFO_URL = "https://api.yelp.com/v3/users/me"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class OAuthConfig:
    """
    OAuth configuration settings.

    Loaded from environment variables. The redirect URI is derived from
    base_url and never stored.
    """

    base_url: str = ""
    http_proxy: str | None = None
    http_timeout: float = 30.0
    authorize_url: str = YELP_AUTHORIZE_URL
    token_url: str = YELP_TOKEN_URL
    user_info_url: str = YELP_USER_INFO_URL
    allow_registration: bool = True
    admin_token: str | None = None
    post_login_path: str = "/user"

    @classmethod
    def from_env(cls) -> "OAuthConfig":
        """Load configuration from environment variables."""
        return cls(
            base_url=os.getenv("BASE_URL", "").rstrip("/"),
            http_proxy=os.getenv("HTTP_CLIENT_PROXY") or None,
            http_timeout=float(os.getenv("HTTP_CLIENT_TIMEOUT", "30")),
            authorize_url=os.getenv("YELP_AUTHORIZE_URL", YELP_AUTHORIZE_URL),
            token_url=os.getenv("YELP_TOKEN_URL", YELP_TOKEN_URL),
            user_info_url=os.getenv("YELP_USER_INFO_URL", YELP_USER_INFO_URL),
            allow_registration=_env_bool("ALLOW_REGISTRATION", True),
            admin_token=os.getenv("ADMIN_TOKEN") or None,
            post_login_path=os.getenv("POST_LOGIN_PATH", "/user"),
        )

    def resolve_base_url(self, request_base_url: str) -> str:
        """Configured base URL, falling back to the incoming request's."""
        return (self.base_url or request_base_url).rstrip("/")

    def get_callback_url(self, base_url: str | None = None) -> str:
        """Generate the callback URL registered with Yelp."""
        return f"{(base_url or self.base_url).rstrip('/')}{CALLBACK_PATH}"


@lru_cache()
def get_oauth_config() -> OAuthConfig:
    """Get OAuth configuration singleton."""
    return OAuthConfig.from_env()
