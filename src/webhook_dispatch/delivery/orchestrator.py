"""
Module: orchestrator.py
Description: Drive one webhook delivery attempt end to end.

An attempt renders the payload, posts it to every endpoint concurrently,
classifies the outcomes, fires the success callback, and then either
hands a continuation for the failed endpoints to the job queue or, once
the attempt budget is spent, fires the exhausted callback.

Key Components:
- DeliveryOrchestrator: deliver(), resume(), deliver_later()
- JobQueue: Interface the retry queue must provide
- RecordedDelivery: What test-mode delivery records instead of posting

Dependencies: asyncio, json, httpx (via push client), pydantic
Author: Webhook Dispatch Team
"""

import asyncio
import json
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from webhook_dispatch.config.delivery import DeliveryConfig
from webhook_dispatch.delivery.backoff import compute_delay
from webhook_dispatch.delivery.callbacks import CallbackDispatcher
from webhook_dispatch.delivery.classifier import build_result, classify
from webhook_dispatch.delivery.continuation import build_continuation
from webhook_dispatch.delivery.errors import DeliveryTransportError, UnknownWebhookClassError
from webhook_dispatch.delivery.payload import PayloadProvider
from webhook_dispatch.delivery.push import PushDeliveryClient, PushResponse
from webhook_dispatch.models.continuation import DeliveryContext, RetryContinuation
from webhook_dispatch.models.endpoint import Endpoint
from webhook_dispatch.models.result import DeliveryBatch, DeliveryResult, DeliveryState
from webhook_dispatch.utils.headers import build_request_headers
from webhook_dispatch.utils.logger import get_logger
from webhook_dispatch.utils.metrics import (
    WEBHOOK_DELIVERED,
    WEBHOOK_FAILED,
    WEBHOOK_RETRIES_EXHAUSTED,
    WEBHOOK_RETRY_SCHEDULED,
    MetricsClient,
)

logger = get_logger(__name__)

EndpointLike = Union[Endpoint, Dict[str, Any]]


class JobQueue(Protocol):
    """Deferred-work queue that later resumes continuations."""

    async def schedule(
        self,
        continuation: RetryContinuation,
        delay: float,
        queue: Optional[str] = None
    ) -> str:
        ...


class HttpClient(Protocol):
    """Anything that can POST a payload the way PushDeliveryClient does."""

    async def post(self, url: str, content: str, headers: Dict[str, str]) -> PushResponse:
        ...


class RecordedDelivery(BaseModel):
    """A delivery captured in test mode instead of being posted."""

    model_config = ConfigDict(frozen=True)

    context: DeliveryContext
    endpoints: List[Endpoint] = Field(default_factory=list)
    payload: Any = None


def coerce_endpoints(endpoints: Iterable[EndpointLike]) -> List[Endpoint]:
    """Build Endpoint models from models or {'url', 'headers'} maps."""
    return [e if isinstance(e, Endpoint) else Endpoint.model_validate(e) for e in endpoints]


class DeliveryOrchestrator:
    """
    Coordinates delivery attempts for one webhook class.

    Method-name callbacks are looked up on callback_target, which is the
    orchestrator itself unless another object is given. Subclasses can
    therefore define their callback methods directly.

    Attributes:
        class_identifier: Registry key stored on continuations
        config: Immutable delivery configuration
        provider: Renders the payload for each attempt
        job_queue: Receives continuations for retries
        deliveries: Deliveries recorded in test mode

    Example:
        >>> orchestrator = DeliveryOrchestrator("user_webhook", config, provider, job_queue)
        >>> batch = await orchestrator.deliver(endpoints, DeliveryContext(action_identifier="created"))
        >>> batch.state
        <DeliveryState.SCHEDULED: 'scheduled'>
    """

    def __init__(
        self,
        class_identifier: str,
        config: DeliveryConfig,
        provider: PayloadProvider,
        job_queue: Optional[JobQueue] = None,
        client: Optional[HttpClient] = None,
        metrics: Optional[MetricsClient] = None,
        callback_target: Any = None
    ):
        """
        Initialize delivery orchestrator.

        Args:
            class_identifier: Registry key used when resuming continuations
            config: Delivery configuration
            provider: Payload provider
            job_queue: Retry queue, required when retries are possible
            client: HTTP client; a PushDeliveryClient is opened per attempt if omitted
            metrics: Optional CloudWatch metrics client
            callback_target: Object passed to callbacks, self by default

        Raises:
            ValueError: If class_identifier is empty, or retries are
                configured without a job queue
        """
        if not class_identifier or not isinstance(class_identifier, str):
            raise ValueError("class_identifier must be a non-empty string")
        if job_queue is None and config.retry_policy.max_retries > 1:
            raise ValueError("job_queue is required when max_retries allows a retry")

        self.class_identifier = class_identifier
        self.config = config
        self.provider = provider
        self.job_queue = job_queue
        self.deliveries: List[RecordedDelivery] = []
        self._client = client
        self._metrics = metrics
        self._dispatcher = CallbackDispatcher(
            self if callback_target is None else callback_target,
            on_delivered=config.after_deliver,
            on_exhausted=config.after_retries_exhausted
        )

    def clear_deliveries(self) -> None:
        self.deliveries = []

    async def deliver(
        self,
        endpoints: Iterable[EndpointLike],
        context: DeliveryContext,
        attempt: int = 0
    ) -> Optional[DeliveryBatch]:
        """
        Run one delivery attempt.

        Args:
            endpoints: Endpoints to deliver to in this attempt
            context: Context for rendering the payload
            attempt: Attempts already made before this one

        Returns:
            DeliveryBatch for the attempt, or None when deliveries are
            disabled or only recorded (test mode)

        Raises:
            TemplateNotFoundError: If the payload cannot be rendered
        """
        targets = coerce_endpoints(endpoints)

        if not self.config.perform_deliveries:
            logger.info(
                "Deliveries disabled, skipping webhook",
                webhook=self.class_identifier,
                action=context.action_identifier
            )
            return None

        if self.config.delivery_method == "test":
            payload = self.provider.render(context.action_identifier, dict(context.data))
            self.deliveries.append(RecordedDelivery(context=context, endpoints=targets, payload=payload))
            return None

        attempt += 1
        payload = self.provider.render(context.action_identifier, dict(context.data))
        content = json.dumps(payload)

        results = await self._post_all(targets, content, attempt)
        succeeded, failed = classify(results)
        counts = {WEBHOOK_DELIVERED: len(succeeded), WEBHOOK_FAILED: len(failed)}

        try:
            await self._dispatcher.delivered(succeeded)
            return await self._settle(context, targets, results, succeeded, failed, attempt, counts)
        finally:
            self._publish(counts)

    async def _settle(
        self,
        context: DeliveryContext,
        targets: Sequence[Endpoint],
        results: List[DeliveryResult],
        succeeded: Sequence[DeliveryResult],
        failed: Sequence[DeliveryResult],
        attempt: int,
        counts: Dict[str, int]
    ) -> DeliveryBatch:
        # A URL listed twice that succeeded once has its payload already
        delivered_urls = {result.url for result in succeeded}
        owed = [result for result in failed if result.url not in delivered_urls]

        if not owed:
            return DeliveryBatch(attempt=attempt, results=results, state=DeliveryState.COMPLETED)

        policy = self.config.retry_policy
        if attempt < policy.max_retries:
            delay = compute_delay(attempt, policy)
            continuation = build_continuation(
                context, targets, failed, attempt, self.class_identifier, succeeded=succeeded
            )

            logger.info(
                "Scheduling webhook retry",
                webhook=self.class_identifier,
                next_attempt=attempt + 1,
                max_retries=policy.max_retries,
                urls=[e.url for e in continuation.remaining_endpoints],
                delay_seconds=delay
            )

            await self.job_queue.schedule(continuation, delay, queue=self.config.queue_name)
            counts[WEBHOOK_RETRY_SCHEDULED] = len(continuation.remaining_endpoints)

            return DeliveryBatch(
                attempt=attempt,
                results=results,
                state=DeliveryState.SCHEDULED,
                continuation=continuation,
                delay=delay
            )

        logger.warning(
            "Webhook retries exhausted",
            webhook=self.class_identifier,
            attempt=attempt,
            urls=[r.url for r in owed]
        )
        await self._dispatcher.exhausted(owed)
        counts[WEBHOOK_RETRIES_EXHAUSTED] = len(owed)

        return DeliveryBatch(attempt=attempt, results=results, state=DeliveryState.EXHAUSTED)

    async def resume(self, continuation: RetryContinuation) -> Optional[DeliveryBatch]:
        """
        Resume a delivery from a continuation handed back by the job queue.

        Raises:
            UnknownWebhookClassError: If the continuation belongs to another webhook
        """
        if continuation.class_identifier != self.class_identifier:
            raise UnknownWebhookClassError(
                f"Continuation for {continuation.class_identifier} "
                f"cannot be resumed by {self.class_identifier}"
            )

        return await self.deliver(
            continuation.remaining_endpoints,
            continuation.delivery_context,
            attempt=continuation.attempt
        )

    async def deliver_later(
        self,
        endpoints: Iterable[EndpointLike],
        context: DeliveryContext,
        wait: float = 0,
        queue: Optional[str] = None
    ) -> RetryContinuation:
        """
        Enqueue the first attempt on the job queue instead of delivering now.

        Args:
            endpoints: Endpoints to deliver to
            context: Context for rendering the payload
            wait: Seconds before the job becomes available
            queue: Queue name, config.queue_name by default

        Returns:
            The continuation handed to the queue (attempt 0)
        """
        if self.job_queue is None:
            raise ValueError("deliver_later requires a job_queue")

        continuation = RetryContinuation(
            action_identifier=context.action_identifier,
            remaining_endpoints=coerce_endpoints(endpoints),
            attempt=0,
            context=context.data,
            class_identifier=self.class_identifier
        )
        await self.job_queue.schedule(continuation, max(0.0, wait), queue=queue or self.config.queue_name)

        logger.info(
            "Webhook delivery enqueued",
            webhook=self.class_identifier,
            action=context.action_identifier,
            endpoints=len(continuation.remaining_endpoints),
            wait_seconds=wait
        )
        return continuation

    async def _post_all(self, endpoints: Sequence[Endpoint], content: str, attempt: int) -> List[DeliveryResult]:
        if self._client is not None:
            return await self._gather(self._client, endpoints, content, attempt)

        async with PushDeliveryClient(self.config.timeout_seconds) as client:
            return await self._gather(client, endpoints, content, attempt)

    async def _gather(
        self,
        client: HttpClient,
        endpoints: Sequence[Endpoint],
        content: str,
        attempt: int
    ) -> List[DeliveryResult]:
        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        # One slot per endpoint, each written by exactly one task
        slots: List[Optional[DeliveryResult]] = [None] * len(endpoints)

        async def post_one(index: int, endpoint: Endpoint) -> None:
            async with semaphore:
                slots[index] = await self._post_endpoint(client, endpoint, content, attempt)

        await asyncio.gather(*(post_one(i, e) for i, e in enumerate(endpoints)))
        return [result for result in slots if result is not None]

    async def _post_endpoint(
        self,
        client: HttpClient,
        endpoint: Endpoint,
        content: str,
        attempt: int
    ) -> DeliveryResult:
        headers = build_request_headers(endpoint.headers, attempt, self.config.default_headers)

        try:
            response = await client.post(endpoint.url, content, headers)

        except DeliveryTransportError as e:
            logger.error(
                "Webhook delivery failed",
                url=endpoint.url,
                attempt=attempt,
                error=str(e)
            )
            return build_result(endpoint.url, attempt, error=e)

        except Exception as e:
            logger.error(
                "Webhook delivery failed",
                url=endpoint.url,
                attempt=attempt,
                error=str(e),
                error_type=type(e).__name__
            )
            return build_result(endpoint.url, attempt, error=e)

        if response.success:
            logger.info(
                "Webhook delivered successfully",
                url=endpoint.url,
                status_code=response.status,
                attempt=attempt
            )
        else:
            logger.warning(
                "Webhook delivery failed with HTTP error",
                url=endpoint.url,
                status_code=response.status,
                attempt=attempt
            )

        return build_result(endpoint.url, attempt, response=response)

    def _publish(self, counts: Dict[str, int]) -> None:
        if self._metrics is None:
            return
        self._metrics.publish_counts(self.class_identifier, counts)
