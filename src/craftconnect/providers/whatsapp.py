"""WhatsApp Cloud API text delivery.

Setup:
1. Create a WhatsApp Business app in Meta for Developers
2. Copy the permanent access token and the sender phone-number id
3. Set FACEBOOK_ACCESS_TOKEN and WHATSAPP_PHONE_ID env vars (or config.yaml)
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from ..exceptions import MessageDeliveryFailed
from .base import MessageSender

logger = logging.getLogger("craftconnect")

_RETRYABLE = (aiohttp.ClientError, asyncio.TimeoutError, MessageDeliveryFailed)


def mask_phone(phone: str) -> str:
    """Phone number with all but the last four digits hidden, for logs."""
    return "*" * max(len(phone) - 4, 0) + phone[-4:]


class WhatsAppSender(MessageSender):
    """Send text messages, retrying with exponential backoff (1s, 2s, ...)."""

    def __init__(
        self,
        access_token: str,
        phone_id: str,
        api_url: str = "https://graph.facebook.com/v18.0",
        max_attempts: int = 3,
        timeout: float = 10.0,
        wait: wait_base | None = None,
    ):
        self._access_token = access_token
        self._phone_id = phone_id
        self._api_url = api_url.rstrip("/")
        self._max_attempts = max_attempts
        self._timeout = timeout
        self._wait = wait or wait_exponential(multiplier=1, max=8)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self._timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def _post(self, payload: dict) -> str:
        url = f"{self._api_url}/{self._phone_id}/messages"
        headers = {"Authorization": f"Bearer {self._access_token}"}
        session = self._get_session()
        async with session.post(url, json=payload, headers=headers) as resp:
            try:
                body = await resp.json(content_type=None)
            except ValueError as e:
                raise MessageDeliveryFailed(
                    f"HTTP {resp.status}: response body is not JSON"
                ) from e
            if resp.status >= 400:
                raise MessageDeliveryFailed(f"HTTP {resp.status}: {body}")
        try:
            return body["messages"][0]["id"]
        except (KeyError, IndexError, TypeError) as e:
            raise MessageDeliveryFailed(f"Unexpected WhatsApp response: {body}") from e

    async def send_text(self, phone: str, body: str) -> str:
        payload = {
            "messaging_product": "whatsapp",
            "to": phone,
            "type": "text",
            "text": {"body": body},
        }
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=self._wait,
                retry=retry_if_exception_type(_RETRYABLE),
                reraise=True,
            ):
                with attempt:
                    n = attempt.retry_state.attempt_number
                    logger.info(
                        "WhatsApp send attempt %d to %s", n, mask_phone(phone)
                    )
                    message_id = await self._post(payload)
        except _RETRYABLE as e:
            logger.warning(
                "All %d WhatsApp send attempts failed: %s", self._max_attempts, e
            )
            if isinstance(e, MessageDeliveryFailed):
                raise
            raise MessageDeliveryFailed(str(e) or type(e).__name__) from e

        logger.info("WhatsApp message sent: %s", message_id)
        return message_id

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session:
            await self._session.close()
            self._session = None
