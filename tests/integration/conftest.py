"""Fixtures for exercising the webhook through the FastAPI app."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from src.interface.command_router import CommandRouter
from src.interface.deps import Deps
from src.interface.whatsapp_sender import SendMessageResult
from src.main import app
from tests.unit.mocks import InMemoryRecordStore


class RecordingSender:
    """Stands in for WhatsAppSender and keeps every outgoing message."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []

    async def send_text_message(self, *, to_phone: str, text: str, **kwargs) -> SendMessageResult:
        self.sent.append({"to": to_phone, "text": text})
        return SendMessageResult(success=True, message_id=f"sent-{len(self.sent)}")

    async def send_group_message(self, *, to_group_id: str, text: str, **kwargs) -> SendMessageResult:
        self.sent.append({"to": to_group_id, "text": text})
        return SendMessageResult(success=True, message_id=f"sent-{len(self.sent)}")


@pytest.fixture
def deps(test_settings) -> Deps:
    store = InMemoryRecordStore()
    return Deps(
        settings=test_settings,
        store=store,
        router=CommandRouter(store=store, settings=test_settings, today=lambda: date(2024, 3, 20)),
        sender=RecordingSender(),
    )


@pytest.fixture
def client(deps):
    """TestClient without lifespan, so no WAHA connectivity check or database file."""
    app.state.deps = deps
    yield TestClient(app)
    del app.state.deps
