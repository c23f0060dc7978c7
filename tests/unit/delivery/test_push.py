"""
Module: test_push.py
Description: Unit tests for the HTTP push delivery client.

Uses httpx.MockTransport to serve canned responses and raise transport
errors without touching the network.
"""

import json

import httpx
import pytest

from webhook_dispatch.delivery.errors import DeliveryTransportError
from webhook_dispatch.delivery.push import MAX_BODY_CHARS, PushDeliveryClient

URL = "https://hooks.example.com/receive"


def client_for(handler):
    return PushDeliveryClient(timeout_seconds=1, transport=httpx.MockTransport(handler))


class TestPushDeliveryClient:
    """Test cases for PushDeliveryClient.post()."""

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError, match="timeout_seconds must be positive"):
            PushDeliveryClient(timeout_seconds=0)

    @pytest.mark.asyncio
    async def test_success_posts_body_and_headers(self):
        seen = {}

        def handler(request):
            seen['method'] = request.method
            seen['body'] = json.loads(request.content)
            seen['auth'] = request.headers['Authorization']
            seen['content_type'] = request.headers['Content-Type']
            return httpx.Response(200, text="ok")

        async with client_for(handler) as client:
            response = await client.post(
                URL,
                json.dumps({'user_id': 42}),
                {'Authorization': 'Bearer x', 'Content-Type': 'application/json'}
            )

        assert response.success is True
        assert response.status == 200
        assert response.body == "ok"
        assert seen == {
            'method': 'POST',
            'body': {'user_id': 42},
            'auth': 'Bearer x',
            'content_type': 'application/json'
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 404, 500, 503])
    async def test_http_errors_are_returned_not_raised(self, status):
        async with client_for(lambda request: httpx.Response(status, text="nope")) as client:
            response = await client.post(URL, "{}", {})

        assert response.success is False
        assert response.status == status
        assert response.body == "nope"

    @pytest.mark.asyncio
    async def test_large_body_truncated(self):
        async with client_for(lambda request: httpx.Response(500, text="x" * (MAX_BODY_CHARS + 50))) as client:
            response = await client.post(URL, "{}", {})

        assert len(response.body) == MAX_BODY_CHARS

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with client_for(handler) as client:
            with pytest.raises(DeliveryTransportError) as exc_info:
                await client.post(URL, "{}", {})

        assert exc_info.value.url == URL
        assert "Timeout" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, httpx.ReadTimeout)

    @pytest.mark.asyncio
    async def test_connection_refused_raises_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with client_for(handler) as client:
            with pytest.raises(DeliveryTransportError, match="Network error"):
                await client.post(URL, "{}", {})

    @pytest.mark.asyncio
    async def test_invalid_url(self):
        async with client_for(lambda request: httpx.Response(200)) as client:
            with pytest.raises(ValueError, match="url must be a non-empty string"):
                await client.post("", "{}", {})
