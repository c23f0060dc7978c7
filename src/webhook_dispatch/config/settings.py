"""
Module: settings.py
Description: Application configuration using pydantic-settings.

Configures delivery, retry, queue and metrics settings from environment
variables with validation and defaults. Supports .env files for local
development.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="Webhook Dispatch", description="Application name")
    log_level: str = Field(default="INFO", description="Logging level")

    # AWS settings
    aws_region: str = Field(default="us-east-1", description="AWS region")

    # SQS settings
    retry_queue_url: Optional[str] = Field(
        default=None,
        description="URL of the SQS queue that carries retry continuations"
    )
    retry_queue_name: Optional[str] = Field(
        default=None,
        description="Logical queue name passed through to the job queue"
    )

    # Delivery settings
    delivery_timeout: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="HTTP timeout in seconds for each endpoint POST"
    )
    max_concurrency: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum concurrent endpoint requests per attempt"
    )

    # Retry settings
    max_retries: int = Field(default=3, ge=0, description="Maximum delivery attempts")
    retry_delay: float = Field(default=30.0, ge=0, description="Base backoff delay in seconds")
    retry_backoff: str = Field(default="exponential", description="fixed, linear or exponential")
    retry_jitter: float = Field(default=5.0, ge=0, description="Maximum additive jitter in seconds")
    retry_max_delay: Optional[float] = Field(
        default=None,
        ge=0,
        description="Optional cap on the backoff term in seconds"
    )

    # Metrics settings
    metrics_enabled: bool = Field(default=False, description="Publish CloudWatch metrics")
    metrics_namespace: str = Field(default="WebhookDispatch", description="CloudWatch namespace")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @field_validator('retry_backoff')
    @classmethod
    def validate_retry_backoff(cls, v: str) -> str:
        """Validate backoff kind is one of the supported strategies."""
        valid_kinds = ['fixed', 'linear', 'exponential']
        if v.lower() not in valid_kinds:
            raise ValueError(f"retry_backoff must be one of: {', '.join(valid_kinds)}")
        return v.lower()

    @field_validator('retry_queue_url')
    @classmethod
    def validate_queue_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate the SQS queue URL when one is configured."""
        if v is None:
            return v
        if not v.startswith(('http://', 'https://')):
            raise ValueError("retry_queue_url must be a valid HTTP/HTTPS URL")
        return v


# Global settings instance
settings = Settings()
