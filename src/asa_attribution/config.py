"""Configuration management for asa-attribution.

Loads settings from environment variables (prefix ``ASA_``) and ``.env``
using Pydantic. Nothing is required; defaults target Apple's production
endpoint.

Usage:
    from asa_attribution.config import settings

    print(settings.endpoint_url)
    print(settings.cache_key)
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENDPOINT_URL = "https://api-adservices.apple.com/api/v1/"
DEFAULT_CACHE_KEY = "savedAttributionPayload"


class Settings(BaseSettings):
    """asa-attribution configuration from environment variables.

    Attributes:
        endpoint_url: AdServices attribution API endpoint
        http_timeout: Request timeout in seconds
        cache_dir: Directory for the file-backed payload cache
        cache_key: Key the payload is stored under
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR)
        analytics_prefix: Prefix for analytics dictionary keys
    """

    model_config = SettingsConfigDict(
        env_prefix="ASA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    endpoint_url: str = Field(default=DEFAULT_ENDPOINT_URL, description="Attribution API endpoint")
    http_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout (seconds)")

    cache_dir: str = Field(default="data", description="Payload cache directory")
    cache_key: str = Field(default=DEFAULT_CACHE_KEY, min_length=1, description="Payload cache key")

    log_level: str = Field(default="INFO", description="Logging level")
    analytics_prefix: str = Field(default="ASA", description="Analytics dictionary key prefix")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got {v}")
        return v_upper

    @field_validator("cache_key")
    @classmethod
    def validate_cache_key(cls, v: str) -> str:
        """Cache keys become file names, so no path separators."""
        if "/" in v or "\\" in v or v in {".", ".."}:
            raise ValueError(f"cache_key must be a plain name, got '{v}'")
        return v

    @field_validator("endpoint_url")
    @classmethod
    def validate_endpoint_url(cls, v: str) -> str:
        """Ensure the endpoint is an http(s) URL."""
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"endpoint_url must be an http(s) URL, got '{v}'")
        return v


# Loaded once at import
settings = Settings()
