"""Settings for ContinuityCraft, from a YAML file, .env and the environment."""

import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import Field, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource

from .core.event import DEFAULT_HEALING_DAYS
from .ai.claude_client import DEFAULT_MODEL

logger = logging.getLogger(__name__)

SETTINGS_FILE = "continuitycraft.yaml"


class Settings(BaseSettings):
    """Environment variables win over ``.env``, which wins over the YAML file."""

    default_healing_days: PositiveInt = DEFAULT_HEALING_DAYS
    model: str = DEFAULT_MODEL
    max_tokens: PositiveInt = 1500
    autosave: bool = True
    anthropic_api_key: Optional[str] = Field(default=None, validation_alias="anthropic_api_key")

    model_config = SettingsConfigDict(
        env_prefix="CONTINUITYCRAFT_",
        env_file=".env",
        extra="ignore",
        yaml_file=SETTINGS_FILE,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (init_settings, env_settings, dotenv_settings, YamlConfigSettingsSource(settings_cls))


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """Load settings.

    Without an explicit path, ``continuitycraft.yaml`` in the working
    directory is read if it exists.
    """
    if path is None:
        return Settings()

    settings_path = Path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    class FileSettings(Settings):
        model_config = SettingsConfigDict(yaml_file=settings_path)

    logger.debug(f"Loading settings from {settings_path}")
    return FileSettings()
