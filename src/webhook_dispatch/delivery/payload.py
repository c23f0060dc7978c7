"""
Module: payload.py
Description: Payload providers for webhook actions.

A payload provider renders the JSON body for an action from its context
data. The orchestrator calls it once per attempt and lets its errors
propagate: a missing template is fatal for the attempt and never retried.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from webhook_dispatch.delivery.errors import TemplateNotFoundError
from webhook_dispatch.utils.logger import get_logger

logger = get_logger(__name__)

RenderFunction = Callable[[Dict[str, Any]], Any]


class PayloadProvider(Protocol):
    """Renders the payload for an action."""

    def render(self, action_identifier: str, context: Dict[str, Any]) -> Any:
        ...


def action_name(action_identifier: str) -> str:
    """
    Strip a 'Class#action' qualifier down to the action name.

    Example:
        >>> action_name("UserWebhook#created")
        'created'
    """
    return action_identifier.split("#")[-1] if "#" in action_identifier else action_identifier


class MappingPayloadProvider:
    """
    Payload provider backed by a map of action names to render functions.

    Example:
        >>> provider = MappingPayloadProvider({"created": lambda ctx: {"user": ctx["user_id"]}})
        >>> provider.render("created", {"user_id": 7})
        {'user': 7}
    """

    def __init__(self, templates: Optional[Mapping[str, RenderFunction]] = None):
        self.templates: Dict[str, RenderFunction] = dict(templates or {})

    def register(self, action: str, render: RenderFunction) -> None:
        if not action or not isinstance(action, str):
            raise ValueError("action must be a non-empty string")
        self.templates[action] = render

    def render(self, action_identifier: str, context: Dict[str, Any]) -> Any:
        """
        Render the payload for an action.

        Raises:
            TemplateNotFoundError: If no render function is registered
        """
        name = action_name(action_identifier)
        render = self.templates.get(name)
        if render is None:
            logger.error("Template not found", action=name)
            raise TemplateNotFoundError(f"Template not found for {name}")

        return render(dict(context))
