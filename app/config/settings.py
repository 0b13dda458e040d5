"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.config.business_constants import (
    DEFAULT_CHECK_SCHEDULE,
    DEFAULT_HOLDING_PERIOD_DAYS,
    DEFAULT_MINIMUM_WITHDRAWAL,
    RECONCILIATION_BATCH_SIZE,
    REFERRAL_DEPTH,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False
    store_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout applied to hierarchy and rate lookups (seconds)"
    )

    # Redis (for Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = Field(
        default=8000, ge=1, le=65535, description="HTTP API port"
    )
    service_api_key: str | None = Field(
        default=None,
        description="Bearer token required by the HTTP API (disabled if empty)"
    )

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/commission_engine.log"
    health_check_port: int = Field(
        default=8081, ge=1, le=65535, description="Health check HTTP server port"
    )

    # Commission engine
    referral_depth: int = Field(
        default=REFERRAL_DEPTH,
        ge=1,
        le=10,
        description="Maximum hierarchy depth walked for one payment"
    )
    reconciliation_batch_size: int = Field(
        default=RECONCILIATION_BATCH_SIZE,
        gt=0,
        le=1000,
        description="Maximum payments picked up by one reconciliation sweep"
    )
    worker_pool_size: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Concurrent payments/affiliates processed inside one job"
    )
    default_holding_period_days: int = Field(
        default=DEFAULT_HOLDING_PERIOD_DAYS,
        ge=0,
        description="Fallback for app_settings.commission_days_to_available"
    )
    default_minimum_withdrawal: Decimal = Field(
        default=DEFAULT_MINIMUM_WITHDRAWAL,
        ge=0,
        description="Fallback for app_settings.commission_min_withdrawal"
    )
    default_check_schedule: str = Field(
        default=DEFAULT_CHECK_SCHEDULE,
        description="Fallback for app_settings.commission_check_schedule"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )

            if not self.service_api_key:
                logger.warning(
                    'SERVICE_API_KEY is not set. '
                    'The HTTP API will accept unauthenticated requests.'
                )
            elif len(self.service_api_key) < 32:
                raise ValueError(
                    'SERVICE_API_KEY must be at least 32 characters in '
                    'production. Generate one with: openssl rand -hex 32'
                )

        return self

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ('postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://')
        ):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        if v.startswith('postgresql://'):
            v = v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate loguru level name."""
        level = v.upper()
        allowed = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f'Invalid LOG_LEVEL: {v}')
        return level


# Global settings instance
settings = Settings()
