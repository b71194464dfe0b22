# src/config.py

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Central application settings (Pydantic v2).

    - Aliases match the .env keys of existing deployments:
      HUBSPOT_THREAD_POLL_ATTEMPTS, HUBSPOT_THREAD_POLL_INTERVAL_MS,
      HUBSPOT_THREAD_LOOKBACK_MS, SMTP_*, HUBSPOT_*
    - Durations are milliseconds, matching the env names.
    """

    # ------------------------------------------------------------------------------------
    # App / API
    # ------------------------------------------------------------------------------------
    PROJECT_NAME: str = Field(default="support-relay", alias="APP_NAME")
    ENVIRONMENT: str = Field(default="dev", alias="ENV")  # dev|staging|prod
    PROJECT_VERSION: str = Field(default="1.0.0")
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: Optional[bool] = Field(default=None, description="Defaults to JSON outside dev")

    # ------------------------------------------------------------------------------------
    # Resource correlation
    # ------------------------------------------------------------------------------------
    CORRELATION_STRATEGY: str = Field(default="poll")  # push | poll | hybrid
    CORRELATION_TIMEOUT_MS: int = Field(default=60_000)
    POLL_MAX_ATTEMPTS: int = Field(default=5, alias="HUBSPOT_THREAD_POLL_ATTEMPTS")
    POLL_INTERVAL_MS: int = Field(default=3_000, alias="HUBSPOT_THREAD_POLL_INTERVAL_MS")
    POLL_LOOKBACK_MS: int = Field(default=10 * 60 * 1000, alias="HUBSPOT_THREAD_LOOKBACK_MS")
    POLL_PAGE_SIZE: int = Field(default=20, alias="HUBSPOT_THREAD_PAGE_SIZE")
    CALLBACK_SIGNING_SECRET: Optional[str] = Field(default=None)

    # ------------------------------------------------------------------------------------
    # HubSpot Conversations
    # ------------------------------------------------------------------------------------
    HUBSPOT_API_BASE_URL: str = Field(default="https://api.hubapi.com")
    HUBSPOT_ACCESS_TOKEN: Optional[str] = Field(default=None)
    HUBSPOT_INBOX_ID: Optional[str] = Field(default=None)
    HUBSPOT_BCC_EMAIL: Optional[str] = Field(default=None)
    HUBSPOT_TIMEOUT_SECONDS: float = Field(default=15.0)

    # ------------------------------------------------------------------------------------
    # SMTP
    # ------------------------------------------------------------------------------------
    SMTP_HOST: Optional[str] = Field(default=None)
    SMTP_PORT: int = Field(default=587)
    SMTP_USER: Optional[str] = Field(default=None)
    SMTP_PASS: Optional[str] = Field(default=None)
    SMTP_SECURE: bool = Field(default=False)
    SMTP_TIMEOUT_SECONDS: float = Field(default=30.0)

    @field_validator("CORRELATION_STRATEGY")
    @classmethod
    def _check_strategy(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"push", "poll", "hybrid"}:
            raise ValueError(f"CORRELATION_STRATEGY must be one of push, poll, hybrid, got {v!r}")
        return v

    @field_validator(
        "CORRELATION_TIMEOUT_MS",
        "POLL_MAX_ATTEMPTS",
        "POLL_PAGE_SIZE",
        "SMTP_PORT",
    )
    @classmethod
    def _check_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("POLL_INTERVAL_MS", "POLL_LOOKBACK_MS")
    @classmethod
    def _check_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return v

    # ------------------------------------------------------------------------------------
    # Helper properties
    # ------------------------------------------------------------------------------------
    @property
    def is_dev(self) -> bool:
        return self.ENVIRONMENT.lower() in {"dev", "development", "local", "test"}

    @property
    def is_prod(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    @property
    def json_logs(self) -> bool:
        if self.LOG_JSON is not None:
            return self.LOG_JSON
        return not self.is_dev

    # ------------------------------------------------------------------------------------
    # Pydantic v2 settings config
    # ------------------------------------------------------------------------------------
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "populate_by_name": True,   # enable aliases
        "extra": "ignore",          # don't crash on unrelated env keys
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
