"""
Module: sqs.py
Description: SQS job queue for webhook retry continuations.

Sends retry continuations to SQS with the requested delay so a worker
Lambda can resume the delivery later. SQS caps message delay at 15
minutes; longer backoffs are clamped to that limit.
"""

import json
import math
from typing import Dict, Optional

from aioboto3 import Session
from botocore.exceptions import ClientError

from webhook_dispatch.config.settings import Settings, settings as default_settings
from webhook_dispatch.models.continuation import RetryContinuation
from webhook_dispatch.utils.logger import get_logger

logger = get_logger(__name__)

MAX_DELAY_SECONDS = 900


class SQSJobQueue:
    """
    SQS-backed job queue for retry continuations.

    Named queues map to their own queue URLs; a continuation scheduled on
    an unknown or absent queue name goes to the default queue.
    """

    def __init__(
        self,
        queue_url: str,
        queue_urls: Optional[Dict[str, str]] = None,
        region_name: Optional[str] = None
    ):
        """
        Initialize SQS job queue.

        Args:
            queue_url: URL of the default SQS queue
            queue_urls: Optional map of queue names to queue URLs
            region_name: AWS region for the SQS client

        Raises:
            ValueError: If queue_url is invalid
        """
        if not queue_url or not isinstance(queue_url, str):
            raise ValueError("queue_url must be a non-empty string")

        self.queue_url = queue_url
        self.queue_urls = dict(queue_urls or {})
        self.region_name = region_name
        self.session = Session()

        logger.info(
            "SQS job queue initialized",
            queue_url=queue_url,
            named_queues=sorted(self.queue_urls)
        )

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None, **kwargs) -> 'SQSJobQueue':
        """
        Build the queue from environment settings.

        Raises:
            ValueError: If no retry_queue_url is configured
        """
        source = source or default_settings
        if not source.retry_queue_url:
            raise ValueError("retry_queue_url must be configured")
        return cls(source.retry_queue_url, region_name=source.aws_region, **kwargs)

    def resolve_queue_url(self, queue: Optional[str]) -> str:
        if queue is None:
            return self.queue_url
        if queue not in self.queue_urls:
            logger.warning("Unknown queue name, using default queue", queue=queue)
            return self.queue_url
        return self.queue_urls[queue]

    async def schedule(
        self,
        continuation: RetryContinuation,
        delay: float,
        queue: Optional[str] = None
    ) -> str:
        """
        Send a continuation to SQS.

        Args:
            continuation: Continuation to enqueue
            delay: Requested delay in seconds
            queue: Optional queue name

        Returns:
            Message ID from SQS

        Raises:
            ClientError: If SQS operation fails
        """
        if not isinstance(continuation, RetryContinuation):
            raise ValueError("continuation must be a RetryContinuation instance")

        queue_url = self.resolve_queue_url(queue)
        delay_seconds = max(0, math.ceil(delay))
        if delay_seconds > MAX_DELAY_SECONDS:
            logger.warning(
                "Retry delay exceeds SQS maximum, clamping",
                requested_seconds=delay_seconds,
                max_seconds=MAX_DELAY_SECONDS
            )
            delay_seconds = MAX_DELAY_SECONDS

        try:
            async with self.session.client('sqs', region_name=self.region_name) as sqs:
                response = await sqs.send_message(
                    QueueUrl=queue_url,
                    MessageBody=json.dumps(continuation.to_message()),
                    MessageAttributes={
                        'ClassIdentifier': {
                            'StringValue': continuation.class_identifier,
                            'DataType': 'String'
                        },
                        'Attempt': {
                            'StringValue': str(continuation.attempt),
                            'DataType': 'Number'
                        }
                    },
                    DelaySeconds=delay_seconds
                )

                message_id = response['MessageId']
                logger.info(
                    "Continuation sent to SQS",
                    webhook=continuation.class_identifier,
                    attempt=continuation.attempt,
                    message_id=message_id,
                    queue_url=queue_url,
                    delay_seconds=delay_seconds
                )

                return message_id

        except ClientError as e:
            logger.error(
                "Failed to send continuation to SQS",
                webhook=continuation.class_identifier,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise
