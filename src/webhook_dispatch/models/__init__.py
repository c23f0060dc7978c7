"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains the data models used by webhook dispatch:
- Endpoint: Delivery target with normalized headers
- RetryPolicy: Attempt budget and backoff strategy
- DeliveryContext / RetryContinuation: Re-render and resume state
- DeliveryResult / DeliveryBatch: Outcomes of an attempt

All models are exported here for convenient importing.
"""

from .endpoint import Endpoint
from .policy import BackoffKind, RetryPolicy
from .continuation import DeliveryContext, RetryContinuation
from .result import DeliveryBatch, DeliveryResult, DeliveryState

__all__ = [
    "Endpoint",
    "BackoffKind",
    "RetryPolicy",
    "DeliveryContext",
    "RetryContinuation",
    "DeliveryBatch",
    "DeliveryResult",
    "DeliveryState",
]
