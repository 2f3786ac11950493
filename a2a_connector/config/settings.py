# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Application settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings for the connector.

    All settings can be overridden via environment variables.
    The integration rules themselves live in the connector config file
    pointed to by ``connector_config_path``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "A2A Connector"
    app_version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8082
    workers: int = 1

    # Connector configuration file (YAML or JSON)
    connector_config_path: str = "connector.yaml"

    # Env vars with these prefixes are exposed as ${NAME} config variables
    variable_env_prefixes: str = "A2A_,CONNECTOR_"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    # Observability
    enable_metrics: bool = True
    metrics_prefix: str = "a2a_connector"

    # Connector's own endpoints; everything else is proxied
    ops_path_prefix: str = "/_connector"

    # Request-side transform failures: "reject" fails the call,
    # "passthrough" forwards the original body. Applied to every error kind.
    request_transform_failure_mode: Literal["reject", "passthrough"] = "reject"

    # Upstream (legacy system)
    upstream_timeout_seconds: float = 30.0

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper

    @field_validator("ops_path_prefix")
    @classmethod
    def normalize_ops_prefix(cls, v: str) -> str:
        """Ensure a leading slash and no trailing slash."""
        v = "/" + v.strip("/")
        if v == "/":
            raise ValueError("ops_path_prefix cannot be the root path")
        return v

    @property
    def variable_env_prefixes_list(self) -> list[str]:
        """Return env var prefixes as a list."""
        return [p.strip() for p in self.variable_env_prefixes.split(",") if p.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "prod"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
