"""
Module: conftest.py
Description: Shared pytest fixtures for webhook dispatch tests.

Provides test settings, sample endpoints, a scripted HTTP client that
returns canned outcomes per URL, payload providers and orchestrators
wired to an in-memory job queue.
"""

import pytest

from helpers import URL_A, URL_B, URL_C
from webhook_dispatch.config.delivery import DeliveryConfig
from webhook_dispatch.config.settings import Settings
from webhook_dispatch.delivery.orchestrator import DeliveryOrchestrator
from webhook_dispatch.delivery.payload import MappingPayloadProvider
from webhook_dispatch.delivery.registry import WebhookRegistry
from webhook_dispatch.models import DeliveryContext, Endpoint, RetryPolicy
from webhook_dispatch.sqs_queue.memory import InMemoryJobQueue


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake AWS credentials so boto3 clients never reach real accounts."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def test_settings():
    """
    Provide test configuration settings.

    Disables .env loading for predictable tests.
    """
    return Settings(
        _env_file=None,
        log_level="DEBUG",
        retry_queue_url="https://sqs.us-east-1.amazonaws.com/123456789012/webhook-retries",
        retry_delay=1.0,
        retry_jitter=0.0,
    )


@pytest.fixture
def endpoints():
    """Three endpoints, headers given in both accepted shapes."""
    return [
        Endpoint(url=URL_A, headers={'Authorization': 'Bearer a'}),
        Endpoint(url=URL_B, headers=[{'key': 'Authorization', 'value': 'Bearer b'}]),
        Endpoint(url=URL_C),
    ]


@pytest.fixture
def delivery_context():
    return DeliveryContext(action_identifier="created", data={'user_id': 42, 'email': 'ada@example.com'})


@pytest.fixture
def provider():
    return MappingPayloadProvider({
        'created': lambda ctx: {'event': 'user.created', 'user_id': ctx['user_id']},
    })


@pytest.fixture
def job_queue():
    return InMemoryJobQueue()


@pytest.fixture
def no_jitter_policy():
    return RetryPolicy(max_retries=3, base_delay=1.0, backoff="exponential", jitter=0.0)


@pytest.fixture
def make_orchestrator(provider, job_queue, no_jitter_policy):
    """
    Factory for orchestrators sharing the in-memory queue.

    Keyword arguments override DeliveryConfig fields.
    """
    def factory(client, class_identifier="user_webhook", **config_overrides):
        config_overrides.setdefault('retry_policy', no_jitter_policy)
        config = DeliveryConfig(**config_overrides)
        return DeliveryOrchestrator(class_identifier, config, provider, job_queue, client=client)

    return factory


@pytest.fixture
def webhooks():
    return WebhookRegistry()
