"""
Module: result.py
Description: Delivery result models.

Defines the outcome of posting to one endpoint and the batch of outcomes
produced by one attempt, together with the state the delivery ended the
attempt in.

Key Components:
- DeliveryResult: Outcome of one POST (HTTP status or transport error)
- DeliveryState: Lifecycle states of a delivery instance
- DeliveryBatch: Results of one attempt with succeeded/failed views

Dependencies: pydantic, enum, typing
Author: Webhook Dispatch Team
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from webhook_dispatch.models.continuation import RetryContinuation


class DeliveryResult(BaseModel):
    """
    Outcome of delivering a payload to one endpoint.

    A successful result always carries the HTTP status. A failed result
    carries either the HTTP status and body, or the transport error that
    prevented a response, never both.

    Attributes:
        url: Endpoint URL the result belongs to
        success: True iff a 2xx response arrived without transport error
        status: HTTP status code, if a response arrived
        body: Response body, if a response arrived
        error: Transport error message, if no response arrived
        attempt: Attempt number that produced this result
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1, description="Endpoint URL")
    success: bool = Field(..., description="Whether delivery succeeded")
    status: Optional[int] = Field(default=None, description="HTTP status code")
    body: Optional[str] = Field(default=None, description="HTTP response body")
    error: Optional[str] = Field(default=None, description="Transport error message")
    attempt: int = Field(..., ge=0, description="Attempt number")

    @model_validator(mode='after')
    def validate_outcome_fields(self) -> 'DeliveryResult':
        """Enforce that status and error are mutually exclusive."""
        if self.status is not None and self.error is not None:
            raise ValueError("result cannot carry both an HTTP status and a transport error")
        if self.status is None and self.error is None:
            raise ValueError("result must carry either an HTTP status or a transport error")
        if self.success and self.error is not None:
            raise ValueError("successful result cannot carry a transport error")
        return self


class DeliveryState(str, Enum):
    """States a delivery instance moves through."""

    INITIAL = "initial"
    ATTEMPTING = "attempting"
    COMPLETED = "completed"
    SCHEDULED = "scheduled"
    EXHAUSTED = "exhausted"


class DeliveryBatch(BaseModel):
    """
    Results produced by one attempt over one set of endpoints.

    Attributes:
        attempt: Attempt number this batch belongs to
        results: One result per endpoint delivered in this attempt
        state: State the delivery reached after this attempt
        continuation: Continuation handed to the job queue, if scheduled
        delay: Backoff delay requested for the continuation, in seconds
    """

    model_config = ConfigDict(frozen=True)

    attempt: int = Field(..., ge=1)
    results: List[DeliveryResult] = Field(default_factory=list)
    state: DeliveryState = Field(default=DeliveryState.ATTEMPTING)
    continuation: Optional[RetryContinuation] = Field(default=None)
    delay: Optional[float] = Field(default=None, ge=0)

    @property
    def succeeded(self) -> List[DeliveryResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[DeliveryResult]:
        return [r for r in self.results if not r.success]
