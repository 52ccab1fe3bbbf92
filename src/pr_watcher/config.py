"""
Configuration management for PR Watcher.

This module handles the JSON config file, environment variables, settings
validation, and configuration management using Pydantic Settings for type
safety and validation.
"""

import json
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = "~/.config/pr-review/config.json"

REPO_FORMAT = re.compile(r"^[\w\-.]+/[\w\-.]+$")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PR_WATCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials
    github_token: str = ""
    github_username: str = ""
    tokens: dict[str, str] = {}

    # Repository management
    repos: str | list[str] = []
    excluded_repos: str | list[str] = []

    # Polling
    poll_interval_seconds: int = 300
    max_concurrent_repositories: int = 5

    # GitHub API
    github_api_url: str = "https://api.github.com"
    request_timeout_seconds: float = 15.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    @field_validator("repos", "excluded_repos", mode="before")
    @classmethod
    def parse_repository_list(cls, v: Any) -> list[str]:
        """Parse repository lists from comma-separated string or list."""
        if isinstance(v, str):
            if not v.strip():
                return []
            return [repo.strip() for repo in v.split(",") if repo.strip()]
        elif isinstance(v, list):
            return v
        else:
            raise ValueError(f"repository list must be a string or list, got {type(v)}")

    @field_validator("poll_interval_seconds", "max_concurrent_repositories")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"must be positive, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in {"json", "console"}:
            raise ValueError(f"Invalid log format: {v}")
        return v


def expand_path(path: str) -> Path:
    """Expand a leading tilde in a config path."""
    return Path(path).expanduser()


def is_valid_repo_format(repo: str) -> bool:
    """Check that a repository string has the ``owner/repo`` shape."""
    return REPO_FORMAT.match(repo) is not None


def validate_settings(settings: Settings) -> None:
    """
    Validate a loaded configuration.

    Raises:
        ConfigurationError: If a required field is missing or a repository
            entry is malformed
    """
    if not settings.github_token and not settings.tokens:
        raise ConfigurationError("github_token or tokens is required")

    if not settings.github_username:
        raise ConfigurationError("github_username is required")

    for repo in [*settings.repos, *settings.excluded_repos]:
        if not is_valid_repo_format(repo):
            raise ConfigurationError(
                f"Invalid repo format: '{repo}' (expected 'owner/repo')",
                context={"repo": repo},
            )


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Load and validate configuration from a JSON file.

    Values from the file take precedence over environment variables.

    Args:
        path: Config file path, defaults to ~/.config/pr-review/config.json

    Returns:
        Validated settings
    """
    config_path = expand_path(str(path or DEFAULT_CONFIG_PATH))

    if not config_path.is_file():
        raise ConfigurationError(
            f"Config file not found: {config_path}", context={"path": str(config_path)}
        )

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Config file not found: {config_path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError("Invalid JSON: top-level value must be an object")

    try:
        settings = Settings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid JSON: {e}") from e

    validate_settings(settings)
    return settings


# Global settings instance - initialized lazily to avoid import-time errors
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance, creating it if necessary."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
