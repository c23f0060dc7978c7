"""
Module: registry.py
Description: Map class identifiers to orchestrator factories.

Continuations only carry a class identifier, so the worker needs a way
back to a configured orchestrator. Each webhook class registers a
factory under its identifier at import time.
"""

from typing import Callable, Dict, List

from webhook_dispatch.delivery.errors import UnknownWebhookClassError
from webhook_dispatch.delivery.orchestrator import DeliveryOrchestrator
from webhook_dispatch.utils.logger import get_logger

logger = get_logger(__name__)

OrchestratorFactory = Callable[[], DeliveryOrchestrator]


class WebhookRegistry:
    """Registry of orchestrator factories keyed by class identifier."""

    def __init__(self):
        self._factories: Dict[str, OrchestratorFactory] = {}

    def register(self, class_identifier: str, factory: OrchestratorFactory) -> None:
        """
        Register an orchestrator factory.

        Args:
            class_identifier: Key carried by continuations
            factory: Zero-argument callable returning an orchestrator

        Raises:
            ValueError: If the identifier is empty or factory not callable
        """
        if not class_identifier or not isinstance(class_identifier, str):
            raise ValueError("class_identifier must be a non-empty string")
        if not callable(factory):
            raise ValueError("factory must be callable")

        if class_identifier in self._factories:
            logger.warning("Replacing registered webhook", webhook=class_identifier)
        self._factories[class_identifier] = factory

    def unregister(self, class_identifier: str) -> None:
        self._factories.pop(class_identifier, None)

    def resolve(self, class_identifier: str) -> DeliveryOrchestrator:
        """
        Build the orchestrator registered for an identifier.

        Raises:
            UnknownWebhookClassError: If nothing is registered
        """
        factory = self._factories.get(class_identifier)
        if factory is None:
            raise UnknownWebhookClassError(f"No webhook registered for {class_identifier}")
        return factory()

    def identifiers(self) -> List[str]:
        return sorted(self._factories)


# Global registry used by the SQS worker
registry = WebhookRegistry()
