"""
User repository interface and implementations.

Defines the port (interface) for user and social identity persistence.
Includes an in-memory implementation for testing and development.
"""

import logging
from datetime import datetime, UTC
from typing import Protocol

from social_auth_yelp.users.models import SocialIdentity, User


logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """
    Protocol defining the user repository interface.

    Uses Protocol for structural subtyping, so any store with these
    coroutines can back the login flow.
    """

    async def get_by_uid(self, uid: str) -> User | None:
        """
        Get a user by local ID.

        Args:
            uid: Local user ID

        Returns:
            User if found, None otherwise
        """
        ...

    async def get_by_email(self, email: str) -> User | None:
        """
        Get a user by email address (case-insensitive).

        Args:
            email: Email address

        Returns:
            User if found, None otherwise
        """
        ...

    async def create(self, user: User) -> User:
        """
        Create a new user.

        Raises:
            ValueError: If user already exists
        """
        ...

    async def get_identity(
        self, plugin_id: str, provider_user_id: str
    ) -> SocialIdentity | None:
        """
        Get the identity linked to a provider account.

        Args:
            plugin_id: Network plugin id
            provider_user_id: User ID at the provider

        Returns:
            SocialIdentity if linked, None otherwise
        """
        ...

    async def save_identity(self, identity: SocialIdentity) -> SocialIdentity:
        """
        Create or update a social identity.

        Raises:
            ValueError: If the linked user does not exist
        """
        ...


class InMemoryUserRepository(UserRepository):
    """
    In-memory implementation of UserRepository.

    Data is lost when the application restarts.
    """

    def __init__(self):
        self._users: dict[str, User] = {}
        self._identities: dict[tuple[str, str], SocialIdentity] = {}

    async def get_by_uid(self, uid: str) -> User | None:
        return self._users.get(uid)

    async def get_by_email(self, email: str) -> User | None:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email and user.email.lower() == wanted:
                return user
        return None

    async def create(self, user: User) -> User:
        if user.uid in self._users:
            raise ValueError(f"User {user.uid} already exists")
        self._users[user.uid] = user
        logger.info(f"Created user: {user.uid}")
        return user

    async def get_identity(
        self, plugin_id: str, provider_user_id: str
    ) -> SocialIdentity | None:
        return self._identities.get((plugin_id, provider_user_id))

    async def save_identity(self, identity: SocialIdentity) -> SocialIdentity:
        if identity.uid not in self._users:
            raise ValueError(f"User {identity.uid} not found - cannot link identity")

        identity.updated_at = datetime.now(UTC)
        self._identities[(identity.plugin_id, identity.provider_user_id)] = identity
        logger.info(f"Saved {identity.plugin_id} identity for user {identity.uid}")
        return identity


# Singleton instance for dependency injection
_repository: UserRepository | None = None


def get_user_repository() -> UserRepository:
    """
    Get the user repository singleton.

    Can be overridden via set_user_repository for testing.
    """
    global _repository
    if _repository is None:
        logger.info("Using in-memory user repository")
        _repository = InMemoryUserRepository()
    return _repository


def set_user_repository(repository: UserRepository) -> None:
    """Set the user repository implementation."""
    global _repository
    _repository = repository


def reset_user_repository() -> None:
    """
    Reset the user repository singleton.

    Useful for testing to ensure clean state between tests.
    """
    global _repository
    _repository = None
