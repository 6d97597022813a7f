"""Pytest configuration and fixtures for unit tests."""

from datetime import date

import pytest

from src.interface.command_parser import ChatCommand
from src.interface.command_router import CommandRouter
from tests.unit.mocks import ANNA, InMemoryRecordStore


@pytest.fixture
def in_memory_store():
    """Provides a fresh InMemoryRecordStore for each test."""
    return InMemoryRecordStore()


@pytest.fixture
def router(in_memory_store, test_settings):
    """CommandRouter on the in-memory store, with today pinned to 2024-03-20."""
    return CommandRouter(store=in_memory_store, settings=test_settings, today=lambda: date(2024, 3, 20))


@pytest.fixture
def make_command():
    """Factory for ChatCommand objects sent by a given member."""

    def _make(name: str, args: str = "", member: tuple[str, str] = ANNA) -> ChatCommand:
        sender_id, sender_name = member
        return ChatCommand(name=name, args=args, sender_id=sender_id, sender_name=sender_name)

    return _make
