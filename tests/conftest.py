"""
Pytest Configuration and Shared Fixtures.

This module provides common fixtures for all tests:

- storage: in-memory key/value storage
- store: GeoStore over that storage with deterministic vendor ids
- cursor: LocationCursor at the default centre
- echo_gateway: assistant that answers immediately
- scripted_gateway: assistant whose replies the test releases one by one
- chat_log / controller: components wired to the scripted gateway
"""

import asyncio
import itertools
from collections.abc import Sequence

import pytest

from geomind.chat.chat_log import ChatLog
from geomind.controller.app_controller import AppController
from geomind.gateway.assistant import AssistantReply
from geomind.gateway.prompts import build_shop_context
from geomind.map.adapter import SnapshotMapAdapter
from geomind.models.schemas import CitationLink, LatLng
from geomind.store.geo_store import GeoStore
from geomind.store.location import LocationCursor
from geomind.store.storage import InMemoryStorage


class EchoGateway:
    """Answers every query at once and records the calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, LatLng, str]] = []

    async def ask(self, query: str, location: LatLng, context: str) -> AssistantReply:
        self.calls.append((query, location, context))
        return AssistantReply(text=f"Echo: {query}")


class ScriptedGateway:
    """Holds every query until the test releases it with ``reply`` or ``fail``."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, LatLng, str]] = []
        self._gates: dict[str, asyncio.Future] = {}

    def _gate(self, query: str) -> asyncio.Future:
        if query not in self._gates:
            self._gates[query] = asyncio.get_running_loop().create_future()
        return self._gates[query]

    async def ask(self, query: str, location: LatLng, context: str) -> AssistantReply:
        self.calls.append((query, location, context))
        return await self._gate(query)

    def reply(self, query: str, text: str, citations: Sequence[CitationLink] = ()) -> None:
        self._gate(query).set_result(AssistantReply(text=text, citations=list(citations)))

    def fail(self, query: str, error: BaseException) -> None:
        self._gate(query).set_exception(error)


def counter_ids(prefix: str):
    """Deterministic id factory: prefix-1, prefix-2, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


@pytest.fixture
def storage() -> InMemoryStorage:
    """Fresh in-memory storage."""
    return InMemoryStorage()


@pytest.fixture
def store(storage) -> GeoStore:
    """Shop directory with the default legend and predictable vendor ids."""
    return GeoStore(storage, id_factory=counter_ids("vendor"))


@pytest.fixture
def cursor() -> LocationCursor:
    return LocationCursor()


@pytest.fixture
def echo_gateway() -> EchoGateway:
    return EchoGateway()


@pytest.fixture
def scripted_gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def chat_log(scripted_gateway, cursor, store) -> ChatLog:
    """Chat log answering through the scripted gateway, without a welcome message."""
    return ChatLog(
        scripted_gateway,
        cursor,
        context_provider=lambda: build_shop_context(store.list_all()),
        id_factory=counter_ids("msg"),
        welcome=None,
    )


@pytest.fixture
def map_adapter() -> SnapshotMapAdapter:
    return SnapshotMapAdapter()


@pytest.fixture
def controller(store, cursor, chat_log, map_adapter) -> AppController:
    return AppController(store=store, cursor=cursor, chat=chat_log, map_adapter=map_adapter)
