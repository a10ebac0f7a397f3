"""
WhatsApp backend client

Talks to the WhatsApp HTTP backend (whatsapp-web bridge) over httpx.
IMessenger Protocol conformant.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from core.constants import WhatsAppDefaults
from core.messaging.templates import format_phone_number
from adapters.interfaces import DeliveryResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendStatus:
    """WhatsApp backend connection state"""

    is_accessible: bool
    is_ready: bool
    status: str
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_accessible": self.is_accessible,
            "is_ready": self.is_ready,
            "status": self.status,
            "error": self.error,
        }


class WhatsAppClient:
    """WhatsApp message sender

    IMessenger Protocol implementation.
    Delivery failures (HTTP errors, timeouts, backend refusals) come back as
    a failed DeliveryResult and are logged; nothing is raised.

    Usage:
    ```python
    async with WhatsAppClient("http://localhost:3001") as client:
        status = await client.check_status()
        if status.is_ready:
            result = await client.send_message("9876543210", "Hello")
    ```
    """

    def __init__(
        self,
        api_url: str = WhatsAppDefaults.API_URL,
        timeout: float = WhatsAppDefaults.TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            api_url: backend base URL
            timeout: HTTP request timeout (seconds)
            transport: custom httpx transport (tests)
        """
        if not api_url:
            raise ValueError("api_url is required")

        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

        # reused across sends
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """HTTP client (lazy initialization)"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def send_message(self, mobile_number: str, text: str) -> DeliveryResult:
        """Send one message

        Args:
            mobile_number: raw mobile number (formatted to 91XXXXXXXXXX here)
            text: message body

        Returns:
            DeliveryResult
        """
        number = format_phone_number(mobile_number)
        payload = {"number": number, "message": text}

        try:
            client = await self._get_client()
            response = await client.post(WhatsAppDefaults.SEND_PATH, json=payload)

            if response.status_code != 200:
                logger.warning(
                    "WhatsApp send failed: number=%s, status=%s, body=%s",
                    number,
                    response.status_code,
                    response.text,
                )
                return DeliveryResult(
                    success=False,
                    error=f"HTTP {response.status_code}",
                    detail=response.text,
                )

            body = response.json()

        except httpx.TimeoutException:
            logger.error("WhatsApp send timed out: number=%s", number)
            return DeliveryResult(
                success=False,
                error="Timeout error",
                detail="Request timed out. Please try again.",
            )
        except httpx.HTTPError as e:
            logger.error("WhatsApp send HTTP error: number=%s, %s", number, e)
            return DeliveryResult(
                success=False,
                error="Network error",
                detail=f"Cannot connect to WhatsApp backend at {self.api_url}",
            )
        except ValueError as e:
            logger.error("WhatsApp send returned invalid JSON: %s", e)
            return DeliveryResult(success=False, error="Invalid response", detail=str(e))

        if body.get("success") is True:
            data = body.get("data") or {}
            logger.debug("WhatsApp message sent to %s", number)
            return DeliveryResult(
                success=True,
                message_id=data.get("messageId"),
                detail=body.get("message"),
            )

        error = body.get("error") or "Unknown error"
        logger.warning("WhatsApp backend refused message to %s: %s", number, error)
        return DeliveryResult(success=False, error=error, detail=body.get("message"))

    async def check_health(self) -> bool:
        """Backend reachable (GET /health returns 200)"""
        try:
            client = await self._get_client()
            response = await client.get(WhatsAppDefaults.HEALTH_PATH)
        except httpx.HTTPError as e:
            logger.warning("WhatsApp backend health check failed: %s", e)
            return False
        return response.status_code == 200

    async def check_status(self) -> BackendStatus:
        """Backend reachability plus WhatsApp session readiness"""
        if not await self.check_health():
            return BackendStatus(
                is_accessible=False,
                is_ready=False,
                status="Backend not running",
                error=f"Cannot reach {self.api_url}",
            )

        try:
            client = await self._get_client()
            response = await client.get(WhatsAppDefaults.STATUS_PATH)
            response.raise_for_status()
            data = response.json().get("data") or {}
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("WhatsApp status check failed: %s", e)
            return BackendStatus(
                is_accessible=True,
                is_ready=False,
                status="error",
                error=str(e),
            )

        return BackendStatus(
            is_accessible=True,
            is_ready=bool(data.get("isReady")),
            status=data.get("connectionStatus") or "unknown",
        )

    # -------------------------------------------------------------------------
    # Context manager
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "WhatsAppClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
