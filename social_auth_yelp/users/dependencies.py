"""
FastAPI dependencies for the user manager.
"""

from typing import Annotated

from fastapi import Depends

from social_auth_yelp.oauth.config import OAuthConfig, get_oauth_config
from social_auth_yelp.users.manager import SocialAuthUserManager
from social_auth_yelp.users.repository import UserRepository, get_user_repository


def get_repository() -> UserRepository:
    """Provide UserRepository dependency."""
    return get_user_repository()


def get_user_manager(
    repository: Annotated[UserRepository, Depends(get_repository)],
    config: Annotated[OAuthConfig, Depends(get_oauth_config)],
) -> SocialAuthUserManager:
    """Provide SocialAuthUserManager dependency."""
    return SocialAuthUserManager(repository, config)


Repository = Annotated[UserRepository, Depends(get_repository)]
UserManager = Annotated[SocialAuthUserManager, Depends(get_user_manager)]
