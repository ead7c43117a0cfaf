# -*- coding: utf-8 -*-
"""Location: ./pushgateway/config.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Push Gateway Configuration.
This module defines configuration settings for the gateway using Pydantic.
It loads configuration from environment variables (and an optional ``.env``
file) with sensible defaults.

Examples:
    >>> from pushgateway.config import Settings
    >>> s = Settings(webhook_max_workers=2)
    >>> s.webhook_max_workers
    2
    >>> s.webhook_root.name
    'webhook'
"""

# Standard
from functools import lru_cache
from pathlib import Path
from typing import Optional

# Third-Party
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Push Gateway configuration settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    app_name: str = "Push Gateway"
    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # text or json
    log_file: Optional[str] = None

    # Webhook plugins
    webhooks_enabled: bool = True
    plugin_path: str = "plugins"
    webhook_config_file: str = "plugins/webhooks.yaml"
    webhook_max_workers: int = Field(default=8, ge=1)

    # Request signatures (hex Ed25519 over the raw request body)
    user_signature_header: str = "X-User-Signature"
    device_signature_header: str = "X-Device-Signature"

    # Secret sealing
    auth_encryption_secret: SecretStr = SecretStr("my-test-salt")
    argon2id_time_cost: int = 3
    argon2id_memory_cost: int = 65536
    argon2id_parallelism: int = 1

    @field_validator("log_level", mode="after")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        """Upper-case and check the configured log level.

        Args:
            value: raw log level.

        Returns:
            The upper-cased level name.

        Raises:
            ValueError: if the level is not a standard logging level.

        Examples:
            >>> Settings(log_level="debug").log_level
            'DEBUG'
        """
        level = value.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}:
            raise ValueError(f"Invalid log level: {value}")
        return level

    @field_validator("log_format", mode="after")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        """Restrict the log format to the supported renderers.

        Args:
            value: raw log format.

        Returns:
            The lower-cased log format.

        Raises:
            ValueError: if the format is neither ``text`` nor ``json``.
        """
        fmt = value.lower()
        if fmt not in {"text", "json"}:
            raise ValueError(f"Invalid log format: {value}")
        return fmt

    @property
    def webhook_root(self) -> Path:
        """Directory that relative webhook script paths resolve against.

        Returns:
            ``<plugin_path>/webhook``.
        """
        return Path(self.plugin_path) / "webhook"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: A cached instance of the Settings class.

    Examples:
        >>> settings = get_settings()
        >>> settings is get_settings()
        True
    """
    return Settings()


settings = get_settings()
