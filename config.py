"""
Configuration for the Compli API.

Every value can be overridden through an environment variable of the same
name (upper-cased) or a local .env file.
"""
import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # === Provider credentials ===
    google_api_key: Optional[str] = Field(None, description="Google Custom Search API key")
    google_cse_id: Optional[str] = Field(None, description="Google Custom Search engine id")
    gnews_api_key: Optional[str] = Field(None, description="GNews API token")
    rapidapi_key: Optional[str] = Field(None, description="RapidAPI key for the review provider")
    rapidapi_host: str = Field("glassdoor-real-time.p.rapidapi.com", description="Review provider host")
    openrouter_api_key: Optional[str] = Field(None, description="OpenRouter API key")
    openrouter_model: str = Field("moonshotai/kimi-dev-72b:free", description="Chat model id")
    openrouter_api_url: str = Field("https://openrouter.ai/api/v1/chat/completions")
    app_url: str = Field("http://localhost:3000", description="Sent as HTTP-Referer to OpenRouter")

    # === Admin & storage ===
    admin_email: Optional[str] = Field(None, description="The one address allowed to read the admin report")
    identity_proxy_secret: Optional[str] = Field(
        None, description="Shared secret the identity proxy sends in X-Proxy-Secret; identity headers are ignored without it"
    )
    database_url: Optional[str] = Field(None, description="MongoDB connection URI")
    database_name: Optional[str] = Field(None, description="MongoDB database name")
    cache_dir: str = Field(".", description="Directory holding the JSON cache files")
    cache_ttl_hours: float = Field(24, description="Cache entry lifetime in hours")

    # === Limits & timeouts ===
    request_timeout: float = Field(8.0, description="Timeout for provider calls, in seconds")
    chat_timeout: float = Field(60.0, description="Timeout for chat completions, in seconds")
    rate_limit_max_requests: int = Field(10, description="Chat requests allowed per window")
    rate_limit_window_seconds: float = Field(60, description="Sliding window length in seconds")

    # === Server ===
    cors_origins: str = Field("*", description="Comma-separated list of allowed CORS origins")
    log_level: str = Field("INFO")
    port: int = Field(8000)

    @field_validator(
        "cache_ttl_hours",
        "request_timeout",
        "chat_timeout",
        "rate_limit_max_requests",
        "rate_limit_window_seconds",
    )
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {v}")
        return level

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_hours * 3600


@lru_cache()
def get_settings() -> Settings:
    return Settings()
