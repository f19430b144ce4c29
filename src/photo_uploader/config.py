"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_CONTENT_TYPES = "image/png,image/jpeg,image/gif,image/webp"


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    api_base_url: str = "http://localhost:8080/api"
    auth_token: str | None = None
    basic_auth_username: str = "user"
    basic_auth_password: str = "password"
    request_timeout_seconds: float = 30.0
    upload_chunk_bytes: int = 64 * 1024
    max_upload_bytes: int = 50 * 1024 * 1024
    allowed_content_types: str = DEFAULT_CONTENT_TYPES
    default_page_size: int = 20
    toast_duration_ms: int = 5000
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="PHOTO_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_content_types(raw: str | None) -> frozenset[str]:
    """Parse the accepted upload MIME types from env."""
    if raw is None:
        return frozenset()
    types: set[str] = set()
    for chunk in raw.split(","):
        value = chunk.strip().lower()
        if value:
            types.add(value)
    return frozenset(types)
