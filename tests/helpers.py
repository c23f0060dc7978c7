"""
Module: helpers.py
Description: Test doubles and sample URLs shared across test modules.

Key Components:
- URL_A / URL_B / URL_C: Sample endpoint URLs
- ScriptedHttpClient: HTTP client double with canned outcomes per URL
- timeout_error(): Transport error as the push client raises it
"""

from typing import Any, Callable, Dict, List, Union

from webhook_dispatch.delivery.errors import DeliveryTransportError
from webhook_dispatch.delivery.push import PushResponse

URL_A = "https://a.example.com/hooks"
URL_B = "https://b.example.com/hooks"
URL_C = "https://c.example.com/hooks"

Outcome = Union[int, BaseException]


class ScriptedHttpClient:
    """
    HTTP client double returning canned outcomes per URL.

    An outcome is a status code or an exception instance. A list of
    outcomes is consumed one per call; its last entry repeats. A callable
    outcome receives the request headers and returns the outcome, for
    endpoints that share a URL.
    """

    def __init__(self, outcomes: Dict[str, Any]):
        self.outcomes = {url: list(v) if isinstance(v, list) else [v] for url, v in outcomes.items()}
        self.calls: List[Dict[str, Any]] = []

    async def post(self, url: str, content: str, headers: Dict[str, str]) -> PushResponse:
        self.calls.append({'url': url, 'content': content, 'headers': headers})

        queue = self.outcomes[url]
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(outcome):
            outcome = outcome(headers)
        if isinstance(outcome, BaseException):
            raise outcome

        return PushResponse(success=200 <= outcome < 300, status=outcome, body=f"status {outcome}")

    def urls_for_attempt(self, attempt: int) -> List[str]:
        return sorted(
            call['url'] for call in self.calls
            if call['headers'].get('X-Webhook-Attempt') == str(attempt)
        )


def by_header(name: str, outcomes: Dict[str, Outcome]) -> Callable[[Dict[str, str]], Outcome]:
    """Pick the outcome from the value of one request header."""
    return lambda headers: outcomes[headers[name]]


def timeout_error(url: str) -> DeliveryTransportError:
    return DeliveryTransportError(url, f"Timeout posting to {url}")
