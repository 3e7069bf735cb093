"""
Local user and social identity models.

A SocialIdentity links one Yelp account (plugin id + Yelp user id) to a
local User. The local user's uid is the primary key.
"""

from datetime import datetime, UTC

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """
    Local user account.

    Created on first Yelp login when registration is allowed, or matched
    by email against an existing account.
    """

    uid: str = Field(description="Local user ID (primary key)")
    name: str = Field(description="Display name")
    email: str | None = Field(default=None, description="Email address")
    active: bool = Field(default=True, description="Blocked users cannot log in")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Account creation timestamp",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Last update timestamp",
    )

    model_config = ConfigDict(extra="forbid")


class SocialIdentity(BaseModel):
    """
    Association between a provider account and a local user.

    Keeps the latest access token and the extra details collected from the
    configured API calls on first login.
    """

    plugin_id: str = Field(description="Network plugin id (social_auth_yelp)")
    provider_user_id: str = Field(description="User ID at the provider")
    uid: str = Field(description="Linked local user ID")
    access_token: str | None = Field(
        default=None, description="Latest OAuth2 access token"
    )
    additional_data: str | None = Field(
        default=None, description="JSON array of extra details"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the identity was linked",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Last login through this identity",
    )

    model_config = ConfigDict(extra="forbid")
