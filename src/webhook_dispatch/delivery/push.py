"""
Module: push.py
Description: HTTP push delivery to webhook endpoints.

Posts a serialized payload to one endpoint with a bounded timeout. Every
HTTP response, 4xx and 5xx included, comes back as a PushResponse; only
failures that produced no response at all raise DeliveryTransportError.
"""

from typing import Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict

from webhook_dispatch.delivery.errors import DeliveryTransportError
from webhook_dispatch.utils.logger import get_logger

logger = get_logger(__name__)

# Truncate large response bodies kept on results and logs
MAX_BODY_CHARS = 2000


class PushResponse(BaseModel):
    """HTTP response summary for one webhook POST."""

    model_config = ConfigDict(frozen=True)

    success: bool
    status: int
    body: str


class PushDeliveryClient:
    """
    Async HTTP client for posting webhook payloads.

    A single httpx.AsyncClient is shared by every request of an attempt so
    concurrent endpoint deliveries reuse connections. Use as an async
    context manager, or call aclose() when done.
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize push delivery client.

        Args:
            timeout_seconds: HTTP timeout in seconds for each POST
            transport: Optional httpx transport (used by tests)

        Raises:
            ValueError: If timeout_seconds is not positive
        """
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

        self.timeout = httpx.Timeout(timeout_seconds, connect=timeout_seconds)
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

        logger.info(
            "Push delivery client initialized",
            timeout_seconds=timeout_seconds
        )

    async def __aenter__(self) -> 'PushDeliveryClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def post(self, url: str, content: str, headers: Dict[str, str]) -> PushResponse:
        """
        POST a serialized payload to one endpoint.

        Args:
            url: Endpoint URL
            content: JSON-serialized payload
            headers: Request headers

        Returns:
            PushResponse with success flag, status code and body

        Raises:
            DeliveryTransportError: If no HTTP response was received
        """
        if not url or not isinstance(url, str):
            raise ValueError("url must be a non-empty string")

        logger.debug("Attempting webhook POST", url=url)

        try:
            response = await self._client.post(url, content=content, headers=headers)

        except httpx.TimeoutException as e:
            logger.warning("Webhook delivery timeout", url=url)
            raise DeliveryTransportError(url, f"Timeout posting to {url}: {e}", e) from e

        except httpx.TransportError as e:
            logger.warning(
                "Webhook delivery network error",
                url=url,
                error=str(e),
                error_type=type(e).__name__
            )
            raise DeliveryTransportError(url, f"Network error posting to {url}: {e}", e) from e

        return PushResponse(
            success=response.is_success,
            status=response.status_code,
            body=response.text[:MAX_BODY_CHARS]
        )
