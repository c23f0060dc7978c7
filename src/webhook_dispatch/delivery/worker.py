"""
Module: delivery/worker.py
Description: SQS worker Lambda for resuming webhook deliveries.

Each SQS record carries one retry continuation. The worker rebuilds the
orchestrator registered for its class identifier and resumes delivery to
the remaining endpoints. Records that cannot be processed are reported
as batch item failures so SQS makes them visible again.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional

from webhook_dispatch.delivery.registry import WebhookRegistry, registry as default_registry
from webhook_dispatch.models.continuation import RetryContinuation
from webhook_dispatch.utils.logger import get_logger

logger = get_logger(__name__)


async def process_records(
    records: List[Dict[str, Any]],
    webhooks: WebhookRegistry
) -> List[Dict[str, str]]:
    """
    Resume the continuation carried by each SQS record.

    Args:
        records: SQS records from the Lambda event
        webhooks: Registry resolving class identifiers

    Returns:
        Batch item failures for records that could not be processed
    """
    batch_failures = []

    for record in records:
        message_id = record.get('messageId')
        try:
            continuation = RetryContinuation.from_message(json.loads(record['body']))

            logger.info(
                "Processing continuation from SQS",
                message_id=message_id,
                webhook=continuation.class_identifier,
                attempt=continuation.attempt,
                endpoints=len(continuation.remaining_endpoints)
            )

            orchestrator = webhooks.resolve(continuation.class_identifier)
            batch = await orchestrator.resume(continuation)

            if batch is not None:
                logger.info(
                    "Continuation processed",
                    message_id=message_id,
                    webhook=continuation.class_identifier,
                    attempt=batch.attempt,
                    state=batch.state.value
                )

        except Exception as e:
            logger.error(
                "Error processing SQS message",
                message_id=message_id,
                error=str(e),
                error_type=type(e).__name__
            )
            batch_failures.append({'itemIdentifier': message_id})

    return batch_failures


def handler(event: Dict[str, Any], context: Any, webhooks: Optional[WebhookRegistry] = None) -> Dict[str, Any]:
    """
    Lambda handler for SQS continuation processing.

    Args:
        event: SQS event with batch of messages
        context: Lambda context
        webhooks: Registry override, the global registry by default

    Returns:
        Response with batch item failures (if any)
    """
    failures = asyncio.run(process_records(event.get('Records', []), webhooks or default_registry))
    return {'batchItemFailures': failures}
