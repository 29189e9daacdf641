"""Shared test utilities and fixtures for agent stream tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
import json
from types import SimpleNamespace
from typing import Any

import httpx
import pytest
import punq

from agent_stream.agents.factory import AgentRegistry
from agent_stream.core.settings import Settings


class FakeAgentExecutor:
    """Executor double that replays scripted events and records each call."""

    def __init__(self, events: list[dict[str, Any]] | None = None, *, fail_with: Exception | None = None) -> None:
        self._events = events or []
        self._fail_with = fail_with
        self.calls: list[dict[str, Any]] = []

    async def astream(self, input, config, *, store, checkpointer) -> AsyncIterator[dict[str, Any]]:
        self.calls.append({"input": input, "config": config, "store": store, "checkpointer": checkpointer})
        for event in self._events:
            yield event
        if self._fail_with is not None:
            raise self._fail_with


@pytest.fixture
def test_settings() -> Settings:
    return Settings()


def build_test_registry(executors: dict[str, Any]) -> AgentRegistry:
    return AgentRegistry(executors)


def build_test_request(container: punq.Container, *, headers: dict[str, str] | None = None):
    """Build a request-shaped object using a real punq container in app state."""

    return SimpleNamespace(
        app=SimpleNamespace(state=SimpleNamespace(container=container)),
        headers=headers or {},
    )


def build_test_container(bindings: dict[object, object]) -> punq.Container:
    """Create a punq container and bind protocol/service keys to test doubles."""

    container = punq.Container()
    for key, value in bindings.items():
        container.register(key, instance=value)
    return container


def sse_body(*payloads: dict[str, Any]) -> bytes:
    return "".join(f"data: {json.dumps(payload)}\n\n" for payload in payloads).encode("utf-8")


def decode_sse_text(text: str) -> list[dict[str, Any]]:
    return [
        json.loads(record[len("data: "):])
        for record in text.split("\n\n")
        if record.startswith("data: ")
    ]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.requests: list[httpx.Request] = []

        async def record(request: httpx.Request):
            self.requests.append(request)
            result = handler(request)
            if hasattr(result, "__await__"):
                result = await result
            return result

        super().__init__(record)

    def json_bodies(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]
