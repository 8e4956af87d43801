"""Tests for WhatsApp Cloud API delivery with retries."""

import logging
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import aiohttp
import pytest
from tenacity import wait_none

from craftconnect.exceptions import MessageDeliveryFailed
from craftconnect.providers.whatsapp import WhatsAppSender, mask_phone


def _sender(max_attempts: int = 3) -> WhatsAppSender:
    return WhatsAppSender(
        access_token="token-123",
        phone_id="555000",
        api_url="https://graph.facebook.com/v18.0/",
        max_attempts=max_attempts,
        wait=wait_none(),
    )


def _install(sender, responses, captured):
    """Replace the session with one that replays ``responses`` in order."""
    queue = list(responses)

    @asynccontextmanager
    async def mock_post(url, json=None, headers=None):
        captured.append({"url": url, "json": json, "headers": headers})
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        status, body = item
        resp = AsyncMock()
        resp.status = status
        if isinstance(body, Exception):
            resp.json.side_effect = body
        else:
            resp.json.return_value = body
        yield resp

    mock_session = AsyncMock()
    mock_session.post = mock_post
    sender._session = mock_session


OK = (200, {"messages": [{"id": "wamid.ABC"}]})


class TestWhatsAppSender:
    @pytest.mark.asyncio
    async def test_success_returns_message_id(self):
        sender = _sender()
        captured = []
        _install(sender, [OK], captured)

        message_id = await sender.send_text("919876543210", "Namaste!")

        assert message_id == "wamid.ABC"
        assert len(captured) == 1
        assert captured[0]["url"] == "https://graph.facebook.com/v18.0/555000/messages"
        assert captured[0]["headers"]["Authorization"] == "Bearer token-123"
        payload = captured[0]["json"]
        assert payload["messaging_product"] == "whatsapp"
        assert payload["to"] == "919876543210"
        assert payload["text"] == {"body": "Namaste!"}
        await sender.close()

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        sender = _sender()
        captured = []
        _install(
            sender,
            [aiohttp.ClientConnectionError("reset"), (500, {"error": "busy"}), OK],
            captured,
        )

        assert await sender.send_text("919876543210", "hi") == "wamid.ABC"
        assert len(captured) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        sender = _sender()
        captured = []
        _install(sender, [(401, {"error": {"code": 190}})] * 3, captured)

        with pytest.raises(MessageDeliveryFailed, match="HTTP 401"):
            await sender.send_text("919876543210", "hi")
        assert len(captured) == 3

    @pytest.mark.asyncio
    async def test_network_errors_are_wrapped(self):
        sender = _sender(max_attempts=2)
        captured = []
        _install(sender, [aiohttp.ClientConnectionError("down")] * 2, captured)

        with pytest.raises(MessageDeliveryFailed, match="down"):
            await sender.send_text("919876543210", "hi")
        assert len(captured) == 2

    @pytest.mark.asyncio
    async def test_unexpected_body_is_a_failure(self):
        sender = _sender(max_attempts=1)
        _install(sender, [(200, {"contacts": []})], [])

        with pytest.raises(MessageDeliveryFailed, match="Unexpected"):
            await sender.send_text("919876543210", "hi")

    @pytest.mark.asyncio
    async def test_close_without_session(self):
        sender = _sender()
        await sender.close()
        assert sender._session is None

    @pytest.mark.asyncio
    async def test_non_json_error_body_is_retried(self):
        sender = _sender()
        captured = []
        gateway_page = ValueError("Expecting value: line 1 column 1 (char 0)")
        _install(sender, [(502, gateway_page)] * 2 + [OK], captured)

        assert await sender.send_text("919876543210", "hi") == "wamid.ABC"
        assert len(captured) == 3

    @pytest.mark.asyncio
    async def test_non_json_body_every_attempt(self):
        sender = _sender()
        captured = []
        _install(sender, [(502, ValueError("not json"))] * 3, captured)

        with pytest.raises(MessageDeliveryFailed, match="HTTP 502: response body"):
            await sender.send_text("919876543210", "hi")
        assert len(captured) == 3

    @pytest.mark.asyncio
    async def test_phone_masked_in_logs(self, caplog):
        sender = _sender()
        _install(sender, [OK], [])

        with caplog.at_level(logging.INFO, logger="craftconnect"):
            await sender.send_text("919876543210", "hi")

        assert "919876543210" not in caplog.text
        assert "********3210" in caplog.text


class TestMaskPhone:
    def test_keeps_last_four_digits(self):
        assert mask_phone("919876543210") == "********3210"

    def test_short_number(self):
        assert mask_phone("123") == "123"
