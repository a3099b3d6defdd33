"""Keygate configuration management.

Configuration sources (in priority order):
1. Environment variables (KEYGATE_ prefix)
2. Config file (config.yaml)
3. Defaults
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class DatabaseConfig(BaseModel):
    """Database configuration."""

    # SQLite by default; postgresql+asyncpg:// also works (FOR UPDATE is honored there)
    url: str = "sqlite+aiosqlite:///./keygate.db"
    echo: bool = False


class SecurityConfig(BaseModel):
    """API key gateway configuration."""

    # Requests under these prefixes bypass the API key gateway.
    # Matching is per path segment: "/graphql" matches "/graphql/x" but not "/graphqlx".
    exempt_path_prefixes: list[str] = Field(
        default_factory=lambda: [
            "/graphql",
            "/health",
            "/account",
            "/v1/plans",
            "/docs",
            "/openapi.json",
        ]
    )

    # Header set by the upstream identity provider for account routes
    account_header: str = "X-Account-Id"

    # The account header is only honored from a proxy presenting this secret
    # in proxy_secret_header. None = no proxy configured.
    proxy_secret: str | None = None
    proxy_secret_header: str = "X-Proxy-Secret"

    # Development mode: trust the account header without a proxy secret
    trust_account_header: bool = False


class CooldownConfig(BaseModel):
    """Cooldown for the verification email resend action."""

    interval_seconds: float = 120.0

    # Entries older than interval + margin are evicted by the sweep
    sweep_margin_seconds: float = 3600.0

    # Number of lock stripes in the cooldown map
    stripes: int = 64


class GCConfig(BaseModel):
    """Background maintenance configuration."""

    enabled: bool = True
    run_on_startup: bool = False
    interval_seconds: int = 300  # 5 minutes


class EmailConfig(BaseModel):
    """Outbound email transport.

    - log: write the message to the structured log (development)
    - http: POST the message to a REST mail provider
    """

    provider: Literal["log", "http"] = "log"
    endpoint: str | None = None
    api_key: str | None = None
    sender: str = "no-reply@worldcup-api.local"
    sender_name: str = "World Cup API"
    timeout_seconds: float = 10.0


class LoggingConfig(BaseModel):
    """structlog configuration."""

    level: str = "INFO"
    json_output: bool = False


class Settings(BaseSettings):
    """Keygate application settings."""

    model_config = SettingsConfigDict(
        env_prefix="KEYGATE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    # Include exception details in 500 responses
    debug: bool = False

    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    cooldown: CooldownConfig = Field(default_factory=CooldownConfig)
    gc: GCConfig = Field(default_factory=GCConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _load_config_file() -> dict:
    """Load configuration from YAML file if exists.

    Looks for config file in order:
    1. KEYGATE_CONFIG_FILE environment variable
    2. ./config.yaml
    3. /etc/keygate/config.yaml
    """
    config_paths = [
        os.environ.get("KEYGATE_CONFIG_FILE"),
        Path("config.yaml"),
        Path("/etc/keygate/config.yaml"),
    ]

    for path in config_paths:
        if path is None:
            continue
        path = Path(path)
        if path.exists():
            with open(path) as f:
                return yaml.safe_load(f) or {}

    return {}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Configuration is loaded from:
    1. YAML config file (if exists)
    2. Environment variables (override)
    3. Defaults
    """
    file_config = _load_config_file()
    return Settings(**file_config)
