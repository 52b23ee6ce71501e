"""Configuration management for mediathek2rss."""

from pydantic import NonNegativeInt, PositiveInt, field_validator
from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from urllib.parse import urlparse


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    host: str = "0.0.0.0"
    port: PositiveInt = 8080

    # Feed settings
    cache_duration: PositiveInt = 300  # Lifetime of a generated feed in seconds
    max_episodes: PositiveInt = 50  # Episodes requested from the upstream APIs

    # Network settings
    http_timeout: PositiveInt = 30  # Timeout for upstream requests in seconds
    http_retries: NonNegativeInt = 2  # Retries on 429/5xx responses
    # Proxy configuration in the format http://host:port or socks5://host:port
    proxy: str | None = None

    @field_validator("proxy")
    @classmethod
    def validate_proxy(cls, v: str | None) -> str | None:
        if v is None:
            return v

        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https", "socks4", "socks5", "socks5h"):
            raise ValueError(
                "Proxy must be a valid URL with scheme http/https/socks4/socks5/socks5h"
            )
        if not parsed.netloc:
            raise ValueError("Proxy must have a host and port")
        return v

    # App settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
