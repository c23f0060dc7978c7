"""
Module: metrics.py
Description: Per-attempt delivery counts in CloudWatch.

Each delivery attempt reports how many endpoints it reached, how many
failed, how many were handed to the retry queue and how many ran out of
retries. The counts of one attempt go out in a single PutMetricData
call, dimensioned by webhook class. A CloudWatch outage is logged and
never fails the delivery that produced the counts.

Dependencies: boto3, botocore, logger
Author: Webhook Dispatch Team
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from typing import Mapping, Optional

from webhook_dispatch.config.settings import Settings, settings as default_settings
from webhook_dispatch.utils.logger import get_logger

logger = get_logger(__name__)

WEBHOOK_DELIVERED = "WebhookDelivered"
WEBHOOK_FAILED = "WebhookFailed"
WEBHOOK_RETRY_SCHEDULED = "WebhookRetryScheduled"
WEBHOOK_RETRIES_EXHAUSTED = "WebhookRetriesExhausted"

WEBHOOK_DIMENSION = "Webhook"


class MetricsClient:
    """
    Publishes delivery counts for webhook classes.

    Attributes:
        namespace: CloudWatch namespace the counts land in
        cloudwatch: boto3 CloudWatch client
    """

    def __init__(self, namespace: str = "WebhookDispatch", region_name: Optional[str] = None):
        if not namespace or not isinstance(namespace, str):
            raise ValueError("namespace must be a non-empty string")

        self.namespace = namespace
        self.cloudwatch = boto3.client('cloudwatch', region_name=region_name)

    def publish_counts(self, webhook: str, counts: Mapping[str, int]) -> int:
        """
        Publish the non-zero counts of one delivery attempt.

        Args:
            webhook: Webhook class identifier, used as the metric dimension
            counts: Metric name to count, e.g. {WEBHOOK_DELIVERED: 2}

        Returns:
            Number of metrics sent; 0 when every count is zero or
            CloudWatch rejected the call
        """
        metric_data = [
            {
                'MetricName': name,
                'Value': float(count),
                'Unit': 'Count',
                'Dimensions': [{'Name': WEBHOOK_DIMENSION, 'Value': webhook}]
            }
            for name, count in counts.items()
            if count
        ]
        if not metric_data:
            return 0

        try:
            self.cloudwatch.put_metric_data(Namespace=self.namespace, MetricData=metric_data)

        except (BotoCoreError, ClientError) as e:
            logger.warning(
                "Delivery metrics not published",
                webhook=webhook,
                metrics=[item['MetricName'] for item in metric_data],
                namespace=self.namespace,
                error=str(e)
            )
            return 0

        logger.debug(
            "Delivery metrics published",
            webhook=webhook,
            counts={name: count for name, count in counts.items() if count},
            namespace=self.namespace
        )
        return len(metric_data)


def metrics_from_settings(source: Optional[Settings] = None) -> Optional[MetricsClient]:
    """Return a MetricsClient when metrics are enabled, else None."""
    source = source or default_settings
    if not source.metrics_enabled:
        return None
    return MetricsClient(namespace=source.metrics_namespace, region_name=source.aws_region)
