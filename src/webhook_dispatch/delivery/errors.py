"""
Module: errors.py
Description: Exception hierarchy for webhook dispatch.

Only TemplateNotFoundError is meant to reach callers of a delivery;
transport errors are raised by the HTTP client and captured into
DeliveryResult by the orchestrator.
"""

from typing import Optional


class WebhookDispatchError(Exception):
    """Base class for webhook dispatch errors."""


class DeliveryTransportError(WebhookDispatchError):
    """No HTTP response arrived (timeout, DNS failure, refused connection)."""

    def __init__(self, url: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.url = url
        self.cause = cause


class TemplateNotFoundError(WebhookDispatchError):
    """The payload provider has nothing to render for an action."""


class ContinuationError(WebhookDispatchError):
    """A persisted retry continuation could not be parsed."""


class UnknownWebhookClassError(WebhookDispatchError):
    """No orchestrator is registered for a continuation's class identifier."""
