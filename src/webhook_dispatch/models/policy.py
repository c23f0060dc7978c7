"""
Module: policy.py
Description: Retry policy model.

Describes how many attempts a webhook gets and how long to wait between
them. Policies are immutable and belong to one webhook class.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BackoffKind(str, Enum):
    """Supported backoff strategies."""

    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


class RetryPolicy(BaseModel):
    """
    Retry configuration for one webhook class.

    Attributes:
        max_retries: Total attempts allowed, the first one included
        base_delay: Base backoff delay in seconds
        backoff: Backoff strategy applied to base_delay
        jitter: Upper bound of the random delay added to the backoff term
        max_delay: Optional cap on the backoff term (jitter is added after)
    """

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default=3, ge=0)
    base_delay: float = Field(default=30.0, ge=0)
    backoff: BackoffKind = Field(default=BackoffKind.EXPONENTIAL)
    jitter: float = Field(default=5.0, ge=0)
    max_delay: Optional[float] = Field(default=None, ge=0)
