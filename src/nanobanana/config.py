"""
Configuration: environment settings, the on-disk config file and precedence rules.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from nanobanana.models.requests import HintMode
from nanobanana.services.batch_executor import DEFAULT_MAX_CONCURRENCY
from nanobanana.services.transport import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

APP_NAME = "nanobanana"
DEFAULT_MODEL = "flash"
CONFIG_FILENAME = "config.json"


class ConfigError(Exception):
    """Config file could not be read or written."""


class Settings(BaseSettings):
    """Settings read from the environment (NANOBANANA_* variables)."""

    model_config = SettingsConfigDict(
        env_prefix="NANOBANANA_",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
        protected_namespaces=("settings_",),
    )

    # NANOBANANA_GEMINI_API_KEY wins over GEMINI_API_KEY
    gemini_api_key: str = Field(default="")
    fallback_api_key: str = Field(default="", validation_alias="GEMINI_API_KEY")

    model: str = Field(default="", description="Default model alias or identifier")
    base_url: str = Field(default=DEFAULT_BASE_URL)
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1, le=8)
    hint_mode: HintMode = Field(default=HintMode.STRUCTURED)


class ConfigFile(BaseModel):
    """Values persisted by `nanobanana setup`."""

    api_key: str = ""
    model: str = DEFAULT_MODEL


def config_dir() -> Path:
    """Directory holding the config file, following XDG on Linux."""
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    return Path.home() / ".config" / APP_NAME


def config_path() -> Path:
    return config_dir() / CONFIG_FILENAME


def load_config(path: Optional[Path] = None) -> ConfigFile:
    """
    Load the config file, returning defaults when it does not exist.

    Raises:
        ConfigError: If the file exists but cannot be read or parsed
    """
    path = path or config_path()
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ConfigFile()
    except OSError as e:
        raise ConfigError(f"reading config: {e}") from e

    try:
        return ConfigFile.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigError(f"parsing config {path}: {e.errors()[0]['msg']}") from e


def save_config(config: ConfigFile, path: Optional[Path] = None) -> Path:
    """
    Write the config file with owner-only permissions.

    Raises:
        ConfigError: If the directory or file cannot be written
    """
    path = path or config_path()
    try:
        path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(config.model_dump(), indent=2) + "\n")
        # O_CREAT mode does not apply to an existing file
        os.chmod(path, 0o600)
    except OSError as e:
        raise ConfigError(f"writing config: {e}") from e

    logger.debug(f"⚙️ [Config] Saved config to {path}")
    return path


def resolve_api_key(settings: Settings, config: ConfigFile) -> str:
    """
    Pick the credential: NANOBANANA_GEMINI_API_KEY > GEMINI_API_KEY > config file.

    Raises:
        ConfigError: If no credential is available
    """
    for key in (settings.gemini_api_key, settings.fallback_api_key, config.api_key):
        if key:
            return key
    raise ConfigError(f"no API key found. Set NANOBANANA_GEMINI_API_KEY or run: {APP_NAME} setup")


def resolve_model_name(flag: Optional[str], settings: Settings, config: ConfigFile) -> str:
    """Pick the model: CLI flag > NANOBANANA_MODEL > config file > default."""
    for name in (flag, settings.model, config.model):
        if name:
            return name
    return DEFAULT_MODEL


def mask_key(key: str) -> str:
    """Show only the first and last four characters of a credential."""
    if len(key) <= 8:
        return "****"
    return f"{key[:4]}...{key[-4:]}"
