"""
Module: delivery.py
Description: Immutable per-webhook delivery configuration.

Each webhook class gets one DeliveryConfig passed to its orchestrator:
retry policy, shared headers, callbacks and delivery switches. Values not
given explicitly can be taken from the environment-backed Settings.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from webhook_dispatch.config.settings import Settings, settings as default_settings
from webhook_dispatch.delivery.callbacks import Callback, as_callback
from webhook_dispatch.models.policy import RetryPolicy
from webhook_dispatch.utils.headers import coerce_headers


class DeliveryConfig(BaseModel):
    """
    Delivery configuration for one webhook class.

    Attributes:
        retry_policy: Attempt budget and backoff
        default_headers: Headers sent to every endpoint, overridable per endpoint
        queue_name: Opaque queue name handed to the job queue
        timeout_seconds: HTTP timeout for each endpoint POST
        max_concurrency: Maximum concurrent endpoint requests per attempt
        after_deliver: Callback fired with each attempt's successes
        after_retries_exhausted: Callback fired with failures once retries run out
        perform_deliveries: When False, deliveries are skipped entirely
        delivery_method: "deliver_now" posts; "test" only records deliveries
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)
    default_headers: Dict[str, str] = Field(default_factory=dict)
    queue_name: Optional[str] = Field(default=None)
    timeout_seconds: float = Field(default=10.0, gt=0)
    max_concurrency: int = Field(default=10, ge=1)
    after_deliver: Optional[Callback] = Field(default=None)
    after_retries_exhausted: Optional[Callback] = Field(default=None)
    perform_deliveries: bool = Field(default=True)
    delivery_method: Literal["deliver_now", "test"] = Field(default="deliver_now")

    @field_validator('default_headers', mode='before')
    @classmethod
    def normalize_default_headers(cls, v: Any) -> Dict[str, str]:
        return coerce_headers(v)

    @field_validator('after_deliver', 'after_retries_exhausted', mode='before')
    @classmethod
    def wrap_callback(cls, v: Any) -> Optional[Callback]:
        """Accept a method name or callable and wrap it as a callback."""
        return as_callback(v)

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None, **overrides: Any) -> 'DeliveryConfig':
        """
        Build a config from environment settings.

        Args:
            source: Settings instance, the global settings by default
            **overrides: Field values that take precedence over settings

        Returns:
            DeliveryConfig
        """
        source = source or default_settings
        values: Dict[str, Any] = {
            'retry_policy': RetryPolicy(
                max_retries=source.max_retries,
                base_delay=source.retry_delay,
                backoff=source.retry_backoff,
                jitter=source.retry_jitter,
                max_delay=source.retry_max_delay,
            ),
            'queue_name': source.retry_queue_name,
            'timeout_seconds': source.delivery_timeout,
            'max_concurrency': source.max_concurrency,
        }
        values.update(overrides)
        return cls(**values)
