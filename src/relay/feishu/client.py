"""Async client for posting messages to a Feishu custom-bot webhook.

Delivery is a single POST. Any failure (transport error, non-2xx status, or a
2xx response whose JSON body reports a non-zero ``code``) raises
FeishuDeliveryError; nothing is retried.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import httpx

from src.relay.errors import FeishuDeliveryError
from src.relay.feishu.models import FeishuMessage
from src.relay.metrics import FEISHU_DELIVERY_SECONDS

logger = logging.getLogger(__name__)


class FeishuClient:
    """Async Feishu webhook client.

    Attributes:
        webhook_url: The bot's incoming-webhook URL, or None if unset.
        timeout: Request timeout in seconds.

    Example:
        >>> client = FeishuClient(webhook_url="https://open.feishu.cn/...")
        >>> async with client:
        ...     await client.send_message(message)
    """

    def __init__(
        self,
        webhook_url: Optional[str],
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the Feishu client.

        Args:
            webhook_url: The bot's incoming-webhook URL.
            timeout: Deadline in seconds for the whole request, including
                     reading the response body.
            http_client: Pre-built httpx client, mainly for tests. It is
                         closed by close() like an internally created one.
        """
        self.webhook_url = webhook_url
        self.timeout = timeout
        self._client = http_client

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": "github-feishu-relay/1.0"},
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FeishuClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def send_message(self, message: FeishuMessage) -> Dict[str, Any]:
        """POST a message to the Feishu webhook.

        Args:
            message: The (optionally signed) message to deliver.

        Returns:
            Dict[str, Any]: The decoded response body, or an empty dict if
            Feishu answered with something other than a JSON object.

        Raises:
            FeishuDeliveryError: If the URL is unset, the request fails, or
                Feishu reports an error.
        """
        if not self.webhook_url:
            raise FeishuDeliveryError("FEISHU_WEBHOOK_URL is not configured")

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self.client.post(
                    self.webhook_url,
                    json=message.to_payload(),
                    headers={"Content-Type": "application/json"},
                ),
                self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error("Feishu request exceeded %ss deadline", self.timeout)
            raise FeishuDeliveryError(
                f"Feishu request timed out after {self.timeout}s"
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "Feishu request failed: %s: %s",
                type(e).__name__,
                e,
            )
            raise FeishuDeliveryError(
                f"Feishu request failed: {type(e).__name__}: {e}"
            ) from e
        finally:
            FEISHU_DELIVERY_SECONDS.observe(time.monotonic() - start)

        if not response.is_success:
            logger.error(
                "Feishu API error: status=%s body=%s",
                response.status_code,
                response.text,
            )
            raise FeishuDeliveryError(
                f"Feishu API error: {response.text}",
                response_status=response.status_code,
                response_body=response.text,
            )

        data = self._decode_body(response)
        code = data.get("code", data.get("StatusCode", 0))
        if code not in (0, None):
            msg = data.get("msg") or data.get("StatusMessage") or ""
            logger.error("Feishu rejected message: code=%s msg=%s", code, msg)
            raise FeishuDeliveryError(
                f"Feishu API error: code={code} msg={msg}",
                response_status=response.status_code,
                response_body=response.text,
            )

        logger.info(
            "Feishu card delivered: %s (signed=%s)", message.title, message.is_signed
        )
        return data

    @staticmethod
    def _decode_body(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            logger.debug("Feishu returned a non-JSON body: %s", response.text)
            return {}
        return data if isinstance(data, dict) else {}
