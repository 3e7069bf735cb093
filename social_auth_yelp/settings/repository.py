"""
Settings repository interface and implementations.

Defines the port for settings persistence, with an in-memory implementation
seeded from the environment and a JSON file implementation for deployments
that need the settings to survive restarts.
"""

import logging
import os
from pathlib import Path
from typing import Protocol

from social_auth_yelp.settings.models import YelpAuthSettings


logger = logging.getLogger(__name__)


def settings_from_env() -> YelpAuthSettings:
    """Initial settings from YELP_* environment variables."""
    return YelpAuthSettings(
        client_id=os.getenv("YELP_CLIENT_ID") or None,
        client_secret=os.getenv("YELP_CLIENT_SECRET") or None,
        scopes=os.getenv("YELP_SCOPES", ""),
        api_calls=os.getenv("YELP_API_CALLS", "").replace("\\n", "\n"),
    )


class SettingsRepository(Protocol):
    """Protocol defining the settings store."""

    async def get(self) -> YelpAuthSettings:
        """
        Load current settings.

        Returns:
            Stored settings (empty settings if nothing was saved yet)
        """
        ...

    async def save(self, settings: YelpAuthSettings) -> YelpAuthSettings:
        """
        Persist settings, replacing what was stored.

        Args:
            settings: Settings to store

        Returns:
            Stored settings
        """
        ...


class InMemorySettingsRepository(SettingsRepository):
    """
    In-memory settings store.

    Data is lost when the application restarts.
    """

    def __init__(self, initial: YelpAuthSettings | None = None):
        self._settings = initial or YelpAuthSettings()

    async def get(self) -> YelpAuthSettings:
        return self._settings.model_copy()

    async def save(self, settings: YelpAuthSettings) -> YelpAuthSettings:
        self._settings = settings.model_copy()
        logger.info("Saved Yelp settings (in-memory)")
        return settings


class JsonFileSettingsRepository(SettingsRepository):
    """Settings stored as a JSON document on disk."""

    def __init__(self, path: str | Path, initial: YelpAuthSettings | None = None):
        self._path = Path(path)
        self._initial = initial or YelpAuthSettings()

    async def get(self) -> YelpAuthSettings:
        if not self._path.exists():
            return self._initial.model_copy()
        return YelpAuthSettings.model_validate_json(self._path.read_text("utf-8"))

    async def save(self, settings: YelpAuthSettings) -> YelpAuthSettings:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(settings.model_dump_json(indent=2), "utf-8")
        tmp_path.replace(self._path)
        logger.info(f"Saved Yelp settings to {self._path}")
        return settings


# Singleton instance for dependency injection
_repository: SettingsRepository | None = None


def get_settings_repository() -> SettingsRepository:
    """
    Get the settings repository singleton.

    Returns JsonFileSettingsRepository when SETTINGS_FILE is set,
    InMemorySettingsRepository otherwise. Both start from the YELP_*
    environment variables.
    """
    global _repository
    if _repository is None:
        settings_file = os.getenv("SETTINGS_FILE")
        if settings_file:
            logger.info(f"Using JSON file settings repository: {settings_file}")
            _repository = JsonFileSettingsRepository(settings_file, settings_from_env())
        else:
            logger.info("Using in-memory settings repository")
            _repository = InMemorySettingsRepository(settings_from_env())
    return _repository


def set_settings_repository(repository: SettingsRepository) -> None:
    """Set the settings repository implementation."""
    global _repository
    _repository = repository


def reset_settings_repository() -> None:
    """
    Reset the settings repository singleton.

    Useful for testing to ensure clean state between tests.
    """
    global _repository
    _repository = None
