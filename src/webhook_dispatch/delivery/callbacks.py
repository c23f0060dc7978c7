"""
Module: callbacks.py
Description: Delivery callbacks and their isolated dispatch.

A callback is registered either by method name, resolved on the callback
target when it fires, or as a plain function. Both forms end up called
with (target, results), and either may be a coroutine function, which
is awaited. Exceptions raised by a callback are logged and
never leave the dispatcher.

Key Components:
- MethodCallback / FunctionCallback: the two callback forms
- as_callback(): Wrap a name or callable into a callback
- CallbackDispatcher: Fires on_delivered / on_exhausted hooks

Dependencies: inspect, typing, logger
Author: Webhook Dispatch Team
"""

import inspect
from typing import Any, Callable, List, Optional, Sequence, Union

from webhook_dispatch.models.result import DeliveryResult
from webhook_dispatch.utils.logger import get_logger

logger = get_logger(__name__)

CallbackFunction = Callable[[Any, List[DeliveryResult]], Any]


class MethodCallback:
    """Callback referring to a method of the callback target by name."""

    def __init__(self, name: str):
        if not name or not isinstance(name, str):
            raise ValueError("name must be a non-empty string")
        self.name = name

    def __call__(self, target: Any, results: List[DeliveryResult]) -> Any:
        method = getattr(target, self.name)
        return method(results)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, MethodCallback) and other.name == self.name

    def __hash__(self) -> int:
        return hash((MethodCallback, self.name))

    def __repr__(self) -> str:
        return f"MethodCallback({self.name!r})"


class FunctionCallback:
    """Callback wrapping a callable taking (target, results)."""

    def __init__(self, function: CallbackFunction):
        if not callable(function):
            raise ValueError("function must be callable")
        self.function = function

    def __call__(self, target: Any, results: List[DeliveryResult]) -> Any:
        return self.function(target, results)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FunctionCallback) and other.function is self.function

    def __hash__(self) -> int:
        return hash((FunctionCallback, id(self.function)))

    def __repr__(self) -> str:
        return f"FunctionCallback({getattr(self.function, '__name__', self.function)!r})"


Callback = Union[MethodCallback, FunctionCallback]


def as_callback(value: Union[str, CallbackFunction, Callback, None]) -> Optional[Callback]:
    """
    Wrap a method name or callable into a callback.

    Example:
        >>> as_callback("record_success")
        MethodCallback('record_success')
    """
    if value is None or isinstance(value, (MethodCallback, FunctionCallback)):
        return value
    if isinstance(value, str):
        return MethodCallback(value)
    return FunctionCallback(value)


class CallbackDispatcher:
    """
    Fires delivery callbacks without letting them disturb delivery.

    Attributes:
        target: Object passed to callbacks and searched for method callbacks
        on_delivered: Fired with the succeeded subset of each attempt
        on_exhausted: Fired with the failed subset once retries run out
    """

    def __init__(
        self,
        target: Any,
        on_delivered: Optional[Callback] = None,
        on_exhausted: Optional[Callback] = None
    ):
        self.target = target
        self.on_delivered = on_delivered
        self.on_exhausted = on_exhausted

    async def delivered(self, succeeded: Sequence[DeliveryResult]) -> bool:
        """Fire on_delivered if there is anything to report."""
        if not succeeded:
            return False
        return await self._invoke("after_deliver", self.on_delivered, succeeded)

    async def exhausted(self, failed: Sequence[DeliveryResult]) -> bool:
        """Fire on_exhausted if there is anything to report."""
        if not failed:
            return False
        return await self._invoke("after_retries_exhausted", self.on_exhausted, failed)

    async def _invoke(self, hook: str, callback: Optional[Callback], results: Sequence[DeliveryResult]) -> bool:
        if callback is None:
            return False

        try:
            # Callbacks get their own copy so they cannot alter the batch
            outcome = callback(self.target, list(results))
            if inspect.isawaitable(outcome):
                await outcome
            return True

        except Exception as e:
            logger.error(
                "Webhook callback raised",
                hook=hook,
                callback=repr(callback),
                urls=[result.url for result in results],
                error=str(e),
                error_type=type(e).__name__
            )
            return False
