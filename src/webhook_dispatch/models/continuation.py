"""
Module: continuation.py
Description: Delivery context and retry continuation models.

A continuation is everything a job queue needs to resume a delivery
later: which webhook class and action to re-render, the context data for
rendering, the attempt count reached so far and the endpoints that still
need the payload. It serializes to a flat JSON record.

Key Components:
- DeliveryContext: Fields needed to re-render a payload
- RetryContinuation: Serializable retry state handed to the job queue

Dependencies: pydantic, typing
Author: Webhook Dispatch Team
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from webhook_dispatch.delivery.errors import ContinuationError
from webhook_dispatch.models.endpoint import Endpoint


class DeliveryContext(BaseModel):
    """
    Context needed to render a webhook payload.

    Attributes:
        action_identifier: Name of the webhook action (e.g. 'created')
        data: Arbitrary JSON-serializable values used while rendering
    """

    model_config = ConfigDict(frozen=True)

    action_identifier: str = Field(..., min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)


class RetryContinuation(BaseModel):
    """
    Serializable state for resuming a delivery on the job queue.

    Attributes:
        action_identifier: Webhook action to re-render
        remaining_endpoints: Endpoints still awaiting the payload
        attempt: Attempts already made
        context: Rendering context data
        class_identifier: Registry key of the webhook class
    """

    model_config = ConfigDict(frozen=True)

    action_identifier: str = Field(..., min_length=1)
    remaining_endpoints: List[Endpoint] = Field(default_factory=list)
    attempt: int = Field(default=0, ge=0)
    context: Dict[str, Any] = Field(default_factory=dict)
    class_identifier: str = Field(..., min_length=1)

    @property
    def delivery_context(self) -> DeliveryContext:
        return DeliveryContext(action_identifier=self.action_identifier, data=self.context)

    def to_message(self) -> Dict[str, Any]:
        """Dump the continuation as a plain JSON-compatible dictionary."""
        return self.model_dump(mode='json')

    @classmethod
    def from_message(cls, message: Dict[str, Any]) -> 'RetryContinuation':
        """
        Rebuild a continuation from its persisted record.

        Raises:
            ContinuationError: If the record is missing fields or malformed
        """
        try:
            return cls.model_validate(message)
        except ValidationError as e:
            raise ContinuationError(f"Invalid retry continuation: {e}") from e
