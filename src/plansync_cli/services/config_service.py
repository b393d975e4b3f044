"""Configuration service for managing PlanSync CLI configuration.

This module provides the ConfigService class, the single source of truth for
configuration in PlanSync CLI. It handles:

- Loading and saving config.json
- Environment overrides for the record store location and key
- Session credential storage for the identity provider
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir
from pydantic import BaseModel

from plansync_cli.models import AppConfig, ValidationError

ENV_STORE_URL = "PLANSYNC_STORE_URL"
ENV_ANON_KEY = "PLANSYNC_ANON_KEY"


class ConfigService:
    """Service for managing application configuration and stored sessions."""

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir("plansync_cli"))
        self.config_path = self.config_dir / "config.json"
        self.credentials_dir = self.config_dir / "credentials"
        self.credentials_path = self.credentials_dir / "session.json"

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.credentials_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage, then apply environment overrides."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run
            config = AppConfig()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        url = os.environ.get(ENV_STORE_URL)
        anon_key = os.environ.get(ENV_ANON_KEY)
        if url:
            config.store.url = url.strip().rstrip("/")
        if anon_key:
            config.store.anon_key = anon_key.strip()

        self._config = config
        return config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self.config.model_dump_json(indent=4))

            self.config_path.chmod(0o600)
        except Exception as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self) -> None:
        """Reset configuration to defaults and forget the stored session."""
        self._config = None
        if self.config_path.exists():
            self.config_path.unlink()
        self.clear_credentials()

    def require_store(self) -> AppConfig:
        """Return the config, failing if the store location or key is unset."""
        store = self.config.store
        if not store.url or not store.anon_key:
            raise ValidationError(
                "Missing project store settings. Set them with "
                "'plansync config set store.url <url>' and "
                "'plansync config set store.anon_key <key>', or export "
                f"{ENV_STORE_URL} and {ENV_ANON_KEY}."
            )
        return self.config

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key."""
        value: Any = self.config
        for k in key.split("."):
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key."""
        keys = key.split(".")
        config_dict = self.config.model_dump()

        current = config_dict
        for k in keys[:-1]:
            if k not in current or not isinstance(current[k], dict):
                raise KeyError(f"Unknown config key: {key}")
            current = current[k]
        if keys[-1] not in current:
            raise KeyError(f"Unknown config key: {key}")

        current[keys[-1]] = value

        self._config = AppConfig(**config_dict)
        self.save_config()

    # Credentials

    def save_credentials(
        self,
        token: str,
        refresh_token: str | None = None,
        *,
        user_id: str | None = None,
        email: str | None = None,
    ) -> None:
        """Save the session tokens of the signed-in user."""
        credentials = {"token": token}
        if refresh_token:
            credentials["refresh_token"] = refresh_token
        if user_id:
            credentials["user_id"] = user_id
        if email:
            credentials["email"] = email

        self.credentials_dir.mkdir(parents=True, exist_ok=True)
        with open(self.credentials_path, "w", encoding="utf-8") as f:
            json.dump(credentials, f, indent=2)

        # Set file permissions to be readable only by owner
        self.credentials_path.chmod(0o600)

    def load_credentials(self) -> dict[str, str] | None:
        """Load the stored session, or None when signed out."""
        if not self.credentials_path.exists():
            return None
        try:
            with open(self.credentials_path, encoding="utf-8") as f:
                credentials = json.load(f)
        except (JSONDecodeError, OSError):
            return None
        if not isinstance(credentials, dict) or "token" not in credentials:
            return None
        return credentials

    def clear_credentials(self) -> None:
        """Forget the stored session."""
        if self.credentials_path.exists():
            self.credentials_path.unlink()


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    return ConfigService()
