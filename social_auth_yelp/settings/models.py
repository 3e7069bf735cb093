"""
Yelp login settings.

Client credentials, requested scopes and the extra API calls made after a
first-time login. Edited through the admin settings form and persisted by a
SettingsRepository.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator


SETTINGS_CONFIG_ID = "social_auth_yelp.settings"

_SCOPE_SEPARATORS = re.compile(r"[\s,]+")


class YelpAuthSettings(BaseModel):
    """Stored settings for Social Auth Yelp."""

    client_id: str | None = Field(default=None, description="Yelp app client ID")
    client_secret: str | None = Field(
        default=None, description="Yelp app client secret"
    )
    scopes: str = Field(
        default="", description="Requested scopes, newline or comma separated"
    )
    api_calls: str = Field(
        default="", description="Extra API endpoints to call, one URL per line"
    )

    model_config = ConfigDict(extra="ignore")

    def is_configured(self) -> bool:
        """Both client id and client secret are present."""
        return bool(self.client_id and self.client_secret)

    def scope_list(self) -> list[str]:
        """Scopes as a list, in the order they were entered."""
        return [s for s in _SCOPE_SEPARATORS.split(self.scopes or "") if s]

    def api_call_list(self) -> list[str]:
        """Extra API call URLs in configured order, blank lines skipped."""
        return [
            line.strip() for line in (self.api_calls or "").splitlines() if line.strip()
        ]


class YelpSettingsForm(BaseModel):
    """Settings form submission. Client id and secret are required."""

    client_id: str = Field(min_length=1, description="Copy the Client ID here.")
    client_secret: str = Field(
        min_length=1, description="Copy the Client Secret here."
    )
    scopes: str = Field(
        default="", description="Define the requested scopes to make API calls."
    )
    api_calls: str = Field(
        default="",
        description="Define the API calls which will retrieve data from provider.",
    )

    @field_validator("client_id", "client_secret", mode="before")
    @classmethod
    def strip_credentials(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    def to_settings(self) -> YelpAuthSettings:
        return YelpAuthSettings(
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=self.scopes,
            api_calls=self.api_calls,
        )


class YelpSettingsView(BaseModel):
    """Settings as shown on the admin page. The secret is masked."""

    client_id: str | None
    client_secret: str | None
    scopes: str
    api_calls: str
    authorized_redirect_url: str = Field(
        description="Copy this value to Authorized redirect URIs of your Yelp app."
    )
    authorized_javascript_origin: str = Field(
        description="Copy this value to Authorized Javascript Origins of your Yelp app."
    )

    @classmethod
    def from_settings(
        cls, settings: YelpAuthSettings, redirect_url: str, origin: str
    ) -> "YelpSettingsView":
        return cls(
            client_id=settings.client_id,
            client_secret=mask_secret(settings.client_secret),
            scopes=settings.scopes,
            api_calls=settings.api_calls,
            authorized_redirect_url=redirect_url,
            authorized_javascript_origin=origin,
        )


def mask_secret(secret: str | None) -> str | None:
    if not secret:
        return None
    if len(secret) <= 4:
        return "*" * len(secret)
    return "*" * (len(secret) - 4) + secret[-4:]
