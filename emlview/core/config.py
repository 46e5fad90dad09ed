from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    VERSION: str = "0.1.0"
    APP_ENV: str = "dev"  # dev|test|prod

    # Uploads and files above this size are rejected before parsing.
    MAX_EML_BYTES: int = 25 * 1024 * 1024

    CORS_ORIGINS: str = "http://localhost:3000"
    REQUEST_ID_HEADER: str = "x-request-id"
    ENABLE_PROMETHEUS_METRICS: bool = True
    PROMETHEUS_METRICS_PATH: str = "/metrics"
    # Parsed HTML is returned as-is; the viewer renders it in a sandboxed frame.
    CONTENT_SECURITY_POLICY: str = (
        "default-src 'self'; "
        "img-src 'self' data: cid:; "
        "style-src 'self' 'unsafe-inline'; "
        "script-src 'self'; "
        "frame-ancestors 'none'; "
        "base-uri 'self'"
    )

    @field_validator("MAX_EML_BYTES")
    @classmethod
    def _validate_max_eml_bytes(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("MAX_EML_BYTES must be positive")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
