"""
Settings administration endpoints.

- GET /admin/config/social-api/social-auth - Integration list
- GET /admin/config/social-api/social-auth/yelp - Current Yelp settings
- PUT /admin/config/social-api/social-auth/yelp - Save the settings form

All endpoints require the X-Admin-Token header.
"""

import logging

from fastapi import APIRouter, Depends

from social_auth_yelp.oauth.dependencies import BaseUrl, Registry
from social_auth_yelp.oauth.config import OAuthConfig, get_oauth_config
from social_auth_yelp.settings.dependencies import SettingsStore, require_admin
from social_auth_yelp.settings.models import YelpSettingsForm, YelpSettingsView


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/config/social-api",
    tags=["settings"],
    dependencies=[Depends(require_admin)],
)


@router.get("/social-auth")
async def list_integrations(registry: Registry, store: SettingsStore):
    """List registered social auth integrations."""
    settings = await store.get()
    return {
        "status": "success",
        "integrations": [
            {
                "id": definition.id,
                "social_network": definition.social_network,
                "settings_config_id": definition.settings_config_id,
                "configured": settings.is_configured(),
                "settings_url": f"{router.prefix}/social-auth/"
                f"{definition.social_network.lower()}",
            }
            for definition in registry.list_definitions(type="social_auth")
        ],
    }


def _view(settings, base_url: str, config: OAuthConfig) -> YelpSettingsView:
    return YelpSettingsView.from_settings(
        settings,
        redirect_url=config.get_callback_url(base_url),
        origin=base_url,
    )


@router.get("/social-auth/yelp", response_model=YelpSettingsView)
async def get_settings(
    store: SettingsStore,
    base_url: BaseUrl,
    config: OAuthConfig = Depends(get_oauth_config),
) -> YelpSettingsView:
    """
    Show the Yelp client settings.

    Includes the redirect URI and JavaScript origin to copy into the Yelp
    app settings. The client secret is masked.
    """
    return _view(await store.get(), base_url, config)


@router.put("/social-auth/yelp", response_model=YelpSettingsView)
async def save_settings(
    form: YelpSettingsForm,
    store: SettingsStore,
    base_url: BaseUrl,
    config: OAuthConfig = Depends(get_oauth_config),
) -> YelpSettingsView:
    """
    Save the Yelp client settings form.

    Client ID and Client Secret are required and trimmed.
    """
    settings = await store.save(form.to_settings())
    logger.info("Yelp settings updated", extra={"configured": settings.is_configured()})
    return _view(settings, base_url, config)
