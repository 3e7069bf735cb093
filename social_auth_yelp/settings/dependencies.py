"""
FastAPI dependencies for the settings endpoints.
"""

import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from social_auth_yelp.oauth.config import OAuthConfig, get_oauth_config
from social_auth_yelp.settings.repository import (
    SettingsRepository,
    get_settings_repository,
)


logger = logging.getLogger(__name__)


def get_settings_store() -> SettingsRepository:
    """Provide SettingsRepository dependency."""
    return get_settings_repository()


async def require_admin(
    config: Annotated[OAuthConfig, Depends(get_oauth_config)],
    x_admin_token: Annotated[str | None, Header()] = None,
) -> None:
    """
    Guard for the settings endpoints.

    Raises:
        HTTPException: 503 if no admin token is configured, 401 on a
            missing or wrong X-Admin-Token header
    """
    if not config.admin_token:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Settings administration is not configured",
        )

    if not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode(), config.admin_token.encode()
    ):
        logger.warning("Rejected settings request with invalid admin token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token",
        )


SettingsStore = Annotated[SettingsRepository, Depends(get_settings_store)]
