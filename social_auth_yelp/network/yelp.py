"""
Yelp network plugin.

Turns stored settings and site configuration into a ready YelpOAuthClient.
"""

import logging

from social_auth_yelp.oauth.client import YelpOAuthClient
from social_auth_yelp.oauth.config import PLUGIN_ID, OAuthConfig
from social_auth_yelp.settings.models import YelpAuthSettings


logger = logging.getLogger(__name__)


class YelpAuthNetwork:
    """Network plugin for Social Auth Yelp."""

    plugin_id = PLUGIN_ID

    def __init__(self, settings: YelpAuthSettings, config: OAuthConfig, base_url: str):
        self.settings = settings
        self.config = config
        self.base_url = base_url

    def validate_config(self) -> bool:
        """Check that client id and client secret are set."""
        if not self.settings.is_configured():
            logger.error(
                "Define Client ID and Client Secret on module settings.",
                extra={"provider": self.plugin_id},
            )
            return False
        return True

    def get_sdk(self) -> YelpOAuthClient | None:
        """
        Create the Yelp OAuth client.

        Returns:
            Configured client, or None if credentials are missing
        """
        if not self.validate_config():
            return None

        return YelpOAuthClient(
            client_id=self.settings.client_id,
            client_secret=self.settings.client_secret,
            redirect_uri=self.config.get_callback_url(self.base_url),
            scopes=self.settings.scope_list(),
            config=self.config,
        )
