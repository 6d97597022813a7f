"""Tests for the WAHA message sender."""

import json

import httpx
import pytest

from src.interface.whatsapp_sender import RateLimiter, WhatsAppSender, format_phone_for_waha


class FakeWaha:
    """Records requests and answers them with queued responses."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


@pytest.fixture
def fake_waha(monkeypatch):
    """Routes every httpx.AsyncClient created by the sender to a FakeWaha."""
    waha = FakeWaha()
    real_client = httpx.AsyncClient

    def _client(**kwargs):
        return real_client(transport=httpx.MockTransport(waha.handler), **kwargs)

    monkeypatch.setattr("src.interface.whatsapp_sender.httpx.AsyncClient", _client)
    return waha


@pytest.fixture
def sender(test_settings):
    return WhatsAppSender(settings=test_settings)


@pytest.mark.unit
def test_format_phone_for_waha():
    assert format_phone_for_waha("+4915100000001") == "4915100000001@c.us"
    assert format_phone_for_waha("4915100000001@c.us") == "4915100000001@c.us"


@pytest.mark.unit
class TestSendTextMessage:
    """Tests for WhatsAppSender.send_text_message."""

    async def test_success(self, sender, fake_waha):
        fake_waha.responses.append(httpx.Response(201, json={"id": {"_serialized": "true_abc"}}))

        result = await sender.send_text_message(to_phone="+4915100000001", text="Hi", retry_delay=0)

        assert result.success
        assert result.message_id == "true_abc"
        request = fake_waha.requests[0]
        assert request.url == "http://waha.test/api/sendText"
        assert request.headers["X-Api-Key"] == "test-api-key"
        assert json.loads(request.content) == {"session": "default", "chatId": "4915100000001@c.us", "text": "Hi"}

    async def test_client_error_is_not_retried(self, sender, fake_waha):
        fake_waha.responses.append(httpx.Response(422, text="invalid chat"))

        result = await sender.send_text_message(to_phone="+4915100000001", text="Hi", retry_delay=0)

        assert not result.success
        assert "invalid chat" in result.error
        assert len(fake_waha.requests) == 1

    async def test_server_error_is_retried(self, sender, fake_waha):
        fake_waha.responses.extend([httpx.Response(503), httpx.Response(200, json={"id": "msg-2"})])

        result = await sender.send_text_message(to_phone="+4915100000001", text="Hi", retry_delay=0)

        assert result.success
        assert result.message_id == "msg-2"
        assert len(fake_waha.requests) == 2

    async def test_gives_up_after_max_retries(self, sender, fake_waha):
        fake_waha.responses.extend([httpx.Response(500)] * 3)

        result = await sender.send_text_message(to_phone="+4915100000001", text="Hi", retry_delay=0)

        assert not result.success
        assert result.error.startswith("Failed after retries")
        assert len(fake_waha.requests) == 3

    async def test_rate_limited(self, test_settings, fake_waha):
        sender = WhatsAppSender(settings=test_settings, rate_limiter=RateLimiter(max_per_minute=1))
        fake_waha.responses.append(httpx.Response(200, json={"id": "msg-1"}))

        first = await sender.send_text_message(to_phone="+4915100000001", text="Hi", retry_delay=0)
        second = await sender.send_text_message(to_phone="+4915100000001", text="Hi again", retry_delay=0)

        assert first.success
        assert not second.success
        assert "Rate limit" in second.error
        assert len(fake_waha.requests) == 1


@pytest.mark.unit
async def test_send_group_message_keeps_group_id(sender, fake_waha):
    fake_waha.responses.append(httpx.Response(200, json={"id": "msg-1"}))

    result = await sender.send_group_message(to_group_id="120363400136168625@g.us", text="Hi", retry_delay=0)

    assert result.success
    assert json.loads(fake_waha.requests[0].content)["chatId"] == "120363400136168625@g.us"
