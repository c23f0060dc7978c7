"""
Module: classifier.py
Description: Turn raw HTTP outcomes into delivery results and split them.

Every non-2xx outcome is a failure and eligible for retry, client errors
included. There is deliberately no permanent-failure short-circuit for
4xx; callers relying on the exhausted callback see every failure there.
"""

from typing import Iterable, List, Optional, Tuple

from webhook_dispatch.delivery.errors import DeliveryTransportError
from webhook_dispatch.delivery.push import PushResponse
from webhook_dispatch.models.result import DeliveryResult


def build_result(
    url: str,
    attempt: int,
    response: Optional[PushResponse] = None,
    error: Optional[BaseException] = None
) -> DeliveryResult:
    """
    Build a DeliveryResult from either a response or an error.

    Args:
        url: Endpoint URL
        attempt: Attempt number the outcome belongs to
        response: HTTP response summary, if one arrived
        error: Exception raised instead of a response

    Returns:
        DeliveryResult for the endpoint
    """
    if error is not None:
        message = str(error) if isinstance(error, DeliveryTransportError) else f"{type(error).__name__}: {error}"
        return DeliveryResult(url=url, success=False, error=message, attempt=attempt)

    if response is None:
        raise ValueError("either response or error is required")

    return DeliveryResult(
        url=url,
        success=response.success,
        status=response.status,
        body=response.body,
        attempt=attempt
    )


def classify(results: Iterable[DeliveryResult]) -> Tuple[List[DeliveryResult], List[DeliveryResult]]:
    """
    Partition results into succeeded and failed lists.

    The split is total and disjoint: every result lands in exactly one
    of the two lists.

    Returns:
        Tuple of (succeeded, failed)
    """
    succeeded: List[DeliveryResult] = []
    failed: List[DeliveryResult] = []
    for result in results:
        if result.success and result.error is None:
            succeeded.append(result)
        else:
            failed.append(result)
    return succeeded, failed
