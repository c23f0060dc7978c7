"""
Module: test_retry_flow.py
Description: Integration tests for multi-attempt webhook delivery.

Runs the real PushDeliveryClient against an httpx.MockTransport and
drains the in-memory job queue through the registry, the way the SQS
worker would, until deliveries complete or exhaust.
"""

import json
from collections import defaultdict

import httpx
import pytest
from unittest.mock import Mock

from helpers import URL_A, URL_B, URL_C
from webhook_dispatch.config.delivery import DeliveryConfig
from webhook_dispatch.delivery.orchestrator import DeliveryOrchestrator
from webhook_dispatch.delivery.push import PushDeliveryClient
from webhook_dispatch.models import DeliveryContext, DeliveryState, RetryPolicy


class FakeReceivers:
    """Serves scripted responses per URL and records every request."""

    def __init__(self, script):
        self.script = script
        self.requests = defaultdict(list)

    def __call__(self, request):
        url = str(request.url)
        self.requests[url].append({
            'attempt': request.headers.get('X-Webhook-Attempt'),
            'body': json.loads(request.content)
        })
        outcome = self.script[url](len(self.requests[url]))
        if outcome == "timeout":
            raise httpx.ConnectTimeout("timed out", request=request)
        return httpx.Response(outcome, json={'received': outcome < 300})


@pytest.fixture
def callbacks():
    return {'delivered': Mock(), 'exhausted': Mock()}


@pytest.fixture
def build(provider, job_queue, webhooks, callbacks):
    """Register an orchestrator whose client talks to the fake receivers."""
    def factory(receivers, max_retries=3):
        config = DeliveryConfig(
            retry_policy=RetryPolicy(max_retries=max_retries, base_delay=2, backoff="exponential", jitter=0),
            after_deliver=callbacks['delivered'],
            after_retries_exhausted=callbacks['exhausted']
        )
        client = PushDeliveryClient(timeout_seconds=1, transport=httpx.MockTransport(receivers))
        orchestrator = DeliveryOrchestrator("user_webhook", config, provider, job_queue, client=client)
        webhooks.register("user_webhook", lambda: orchestrator)
        return orchestrator

    return factory


class TestRetryFlow:
    """End-to-end retry narrowing and exhaustion."""

    @pytest.mark.asyncio
    async def test_partial_failure_retries_only_failed_endpoint(self, build, job_queue, webhooks, callbacks, delivery_context):
        receivers = FakeReceivers({
            URL_A: lambda n: 200,
            URL_B: lambda n: 200,
            URL_C: lambda n: "timeout" if n == 1 else 200,
        })
        orchestrator = build(receivers)

        first = await orchestrator.deliver([{'url': u} for u in (URL_A, URL_B, URL_C)], delivery_context)

        assert first.state == DeliveryState.SCHEDULED
        assert [e.url for e in first.continuation.remaining_endpoints] == [URL_C]
        assert first.continuation.attempt == 1
        assert job_queue.jobs[0].delay == 2

        batches = await job_queue.drain(webhooks.resolve)

        assert [b.state for b in batches] == [DeliveryState.COMPLETED]
        assert len(receivers.requests[URL_A]) == 1
        assert len(receivers.requests[URL_B]) == 1
        assert [r['attempt'] for r in receivers.requests[URL_C]] == ['1', '2']
        assert receivers.requests[URL_C][1]['body'] == {'event': 'user.created', 'user_id': 42}

        delivered_sets = [sorted(r.url for r in c.args[1]) for c in callbacks['delivered'].call_args_list]
        assert delivered_sets == [[URL_A, URL_B], [URL_C]]
        callbacks['exhausted'].assert_not_called()

    @pytest.mark.asyncio
    async def test_persistent_server_error_exhausts_once(self, build, job_queue, webhooks, callbacks, delivery_context):
        receivers = FakeReceivers({URL_A: lambda n: 500})
        orchestrator = build(receivers)

        first = await orchestrator.deliver([{'url': URL_A}], delivery_context)
        batches = await job_queue.drain(webhooks.resolve)

        assert first.state == DeliveryState.SCHEDULED
        assert [b.state for b in batches] == [DeliveryState.SCHEDULED, DeliveryState.EXHAUSTED]
        assert len(receivers.requests[URL_A]) == 3
        assert job_queue.jobs == []

        callbacks['exhausted'].assert_called_once()
        exhausted = callbacks['exhausted'].call_args[0][1]
        assert [(r.url, r.status, r.attempt) for r in exhausted] == [(URL_A, 500, 3)]
        callbacks['delivered'].assert_not_called()

    @pytest.mark.asyncio
    async def test_backoff_grows_between_attempts(self, build, job_queue, webhooks, delivery_context):
        receivers = FakeReceivers({URL_A: lambda n: 503})
        orchestrator = build(receivers, max_retries=4)

        first = await orchestrator.deliver([{'url': URL_A}], delivery_context)
        batches = await job_queue.drain(webhooks.resolve)

        assert [first.delay] + [b.delay for b in batches] == [2, 4, 8, None]

    @pytest.mark.asyncio
    async def test_mixed_failures_narrow_each_round(self, build, job_queue, webhooks, callbacks, delivery_context):
        receivers = FakeReceivers({
            URL_A: lambda n: 200 if n >= 2 else 502,
            URL_B: lambda n: 404,
            URL_C: lambda n: 200,
        })
        orchestrator = build(receivers)

        first = await orchestrator.deliver([{'url': u} for u in (URL_A, URL_B, URL_C)], delivery_context)
        batches = await job_queue.drain(webhooks.resolve)

        assert sorted(e.url for e in first.continuation.remaining_endpoints) == [URL_A, URL_B]
        assert [e.url for e in batches[0].continuation.remaining_endpoints] == [URL_B]
        assert batches[-1].state == DeliveryState.EXHAUSTED
        assert [len(receivers.requests[u]) for u in (URL_A, URL_B, URL_C)] == [2, 3, 1]
        assert [r.url for r in callbacks['exhausted'].call_args[0][1]] == [URL_B]


@pytest.fixture
def delivery_context():
    return DeliveryContext(action_identifier="created", data={'user_id': 42})
