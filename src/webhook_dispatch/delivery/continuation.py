"""
Module: delivery/continuation.py
Description: Build retry continuations from a failed subset.

Results are attributed by URL, so a continuation carries each URL that
failed in the attempt and did not also succeed in it, once. That is what
narrows every retry to the endpoints that still need the payload.
"""

from typing import Iterable, List, Sequence

from webhook_dispatch.models.continuation import DeliveryContext, RetryContinuation
from webhook_dispatch.models.endpoint import Endpoint
from webhook_dispatch.models.result import DeliveryResult
from webhook_dispatch.utils.logger import get_logger

logger = get_logger(__name__)


def failed_endpoints(
    endpoints: Sequence[Endpoint],
    failed: Iterable[DeliveryResult],
    succeeded: Iterable[DeliveryResult] = ()
) -> List[Endpoint]:
    """
    Select the endpoints still owed the payload, by URL.

    A URL is owed when it failed and did not succeed in the same attempt.
    Endpoint order from the attempt is preserved, and only the first
    endpoint listed for a URL is kept.
    """
    owed = {result.url for result in failed} - {result.url for result in succeeded}

    remaining: List[Endpoint] = []
    for endpoint in endpoints:
        if endpoint.url in owed:
            remaining.append(endpoint)
            owed.discard(endpoint.url)
    return remaining


def build_continuation(
    context: DeliveryContext,
    endpoints: Sequence[Endpoint],
    failed: Sequence[DeliveryResult],
    attempt: int,
    class_identifier: str,
    succeeded: Sequence[DeliveryResult] = ()
) -> RetryContinuation:
    """
    Package the failed subset of an attempt for the job queue.

    Args:
        context: Context needed to re-render the payload
        endpoints: Endpoints delivered in the attempt
        failed: Failed results of the attempt
        attempt: Attempt number just completed
        class_identifier: Registry key used to rebuild the orchestrator
        succeeded: Succeeded results of the attempt; their URLs are never retried

    Returns:
        RetryContinuation for the remaining endpoints
    """
    remaining = failed_endpoints(endpoints, failed, succeeded)

    succeeded_urls = {result.url for result in succeeded}
    owed_urls = {result.url for result in failed} - succeeded_urls
    delivered_urls = {result.url for result in failed} & succeeded_urls

    if delivered_urls:
        logger.info(
            "Not retrying URLs that succeeded in the same attempt",
            urls=sorted(delivered_urls)
        )

    unmatched = owed_urls - {endpoint.url for endpoint in remaining}
    if unmatched:
        logger.warning(
            "Failed results without a matching endpoint were dropped",
            urls=sorted(unmatched)
        )

    return RetryContinuation(
        action_identifier=context.action_identifier,
        remaining_endpoints=remaining,
        attempt=attempt,
        context=context.data,
        class_identifier=class_identifier
    )
