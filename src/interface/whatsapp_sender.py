"""WhatsApp message sender with rate limiting and retry logic using WAHA."""

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timedelta

import httpx
from pydantic import BaseModel, Field

from src.core.config import Settings, constants


logger = logging.getLogger(__name__)


# HTTP status code constants for error handling
HTTP_CLIENT_ERROR_START = 400
HTTP_CLIENT_ERROR_END = 500


class SendMessageResult(BaseModel):
    """Result of sending a WhatsApp message."""

    success: bool = Field(..., description="Whether the message was sent successfully")
    message_id: str | None = Field(None, description="WhatsApp message ID if successful")
    error: str | None = Field(None, description="Error message if failed")


class RateLimiter:
    """In-memory rate limiter for WhatsApp API calls.

    Tracks requests per chat per minute to prevent exceeding rate limits.
    """

    def __init__(self, max_per_minute: int = constants.MAX_REQUESTS_PER_MINUTE) -> None:
        """Initialize rate limiter."""
        self._requests: dict[str, list[datetime]] = defaultdict(list)
        self._max_per_minute = max_per_minute

    def can_send(self, chat_id: str) -> bool:
        """Check if a message can be sent to the given chat.

        Args:
            chat_id: Chat to check

        Returns:
            True if sending is allowed, False if rate limited
        """
        now = datetime.now()
        cutoff = now - timedelta(minutes=1)

        # Clean up old requests
        self._requests[chat_id] = [ts for ts in self._requests[chat_id] if ts > cutoff]

        return len(self._requests[chat_id]) < self._max_per_minute

    def record_request(self, chat_id: str) -> None:
        """Record a request for rate limiting.

        Args:
            chat_id: Chat to record
        """
        self._requests[chat_id].append(datetime.now())


def format_phone_for_waha(phone: str) -> str:
    """Format phone number for WAHA (e.g., '1234567890@c.us')."""
    clean_phone = phone.replace("whatsapp:", "").replace("+", "").strip()
    if not clean_phone.endswith("@c.us"):
        clean_phone = f"{clean_phone}@c.us"
    return clean_phone


def _extract_message_id(data: dict) -> str | None:
    """Extract message ID from WAHA response.

    WAHA returns { "id": ... } where id can be a string or an object.
    If it's an object (e.g., {"fromMe": True, "remote": "...", "_serialized": "..."}),
    extract the _serialized field or convert to string.
    """
    raw_id = data.get("id")
    if isinstance(raw_id, dict):
        return raw_id.get("_serialized") or str(raw_id)
    return raw_id


class WhatsAppSender:
    """Sends replies through the WAHA HTTP API.

    Created once at startup and shared by all requests.
    """

    def __init__(self, *, settings: Settings, rate_limiter: RateLimiter | None = None) -> None:
        self._settings = settings
        self.rate_limiter = rate_limiter or RateLimiter()

    async def _send_waha_message(
        self,
        *,
        chat_id: str,
        text: str,
        max_retries: int,
        retry_delay: float,
    ) -> SendMessageResult:
        """Core message sending logic with retry."""
        url = f"{self._settings.waha_base_url}/api/sendText"
        payload = {"session": "default", "chatId": chat_id, "text": text}
        headers = {"Content-Type": "application/json"}
        if self._settings.waha_api_key:
            headers["X-Api-Key"] = self._settings.waha_api_key

        for attempt in range(max_retries):
            try:
                async with httpx.AsyncClient(timeout=constants.API_TIMEOUT_SECONDS) as client:
                    response = await client.post(url, json=payload, headers=headers)

                    if response.is_success:
                        return SendMessageResult(success=True, message_id=_extract_message_id(response.json()))

                    if HTTP_CLIENT_ERROR_START <= response.status_code < HTTP_CLIENT_ERROR_END:
                        return SendMessageResult(success=False, error=f"Client error: {response.text}")

                    raise httpx.HTTPStatusError(
                        f"Server error: {response.status_code}", request=response.request, response=response
                    )
            except Exception as e:
                logger.warning("WAHA send attempt %d/%d failed: %s", attempt + 1, max_retries, e)
                if attempt < max_retries - 1:
                    await asyncio.sleep(retry_delay * (2**attempt))
                else:
                    return SendMessageResult(success=False, error=f"Failed after retries: {e!s}")

        return SendMessageResult(success=False, error="Max retries exceeded")

    async def send_text_message(
        self,
        *,
        to_phone: str,
        text: str,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ) -> SendMessageResult:
        """Send a text message to a single member via WAHA API with retry logic."""
        if not self.rate_limiter.can_send(to_phone):
            return SendMessageResult(success=False, error="Rate limit exceeded. Please try again later.")

        self.rate_limiter.record_request(to_phone)
        chat_id = format_phone_for_waha(to_phone)
        return await self._send_waha_message(
            chat_id=chat_id, text=text, max_retries=max_retries, retry_delay=retry_delay
        )

    async def send_group_message(
        self,
        *,
        to_group_id: str,
        text: str,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ) -> SendMessageResult:
        """Send a text message to a WhatsApp group via WAHA API with retry logic."""
        if not self.rate_limiter.can_send(to_group_id):
            return SendMessageResult(success=False, error="Rate limit exceeded. Please try again later.")

        self.rate_limiter.record_request(to_group_id)
        return await self._send_waha_message(
            chat_id=to_group_id, text=text, max_retries=max_retries, retry_delay=retry_delay
        )
