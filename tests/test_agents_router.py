"""HTTP-level tests for the agents router and error rendering."""

from __future__ import annotations

import logging
import re

from fastapi.testclient import TestClient
import pytest

from agent_stream.agents.factory import AgentRegistry
from agent_stream.api.routers import agents as agents_router
from agent_stream.core.settings import Settings
from agent_stream.dependency_injection import build_container
from agent_stream.main import create_app
from tests.conftest import FakeAgentExecutor, build_test_container, build_test_request, decode_sse_text

UUID4_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")
STREAM_URL = "/api/agents/memory-agent/stream"


def _client(executors: dict[str, FakeAgentExecutor], settings: Settings | None = None) -> TestClient:
    settings = settings or Settings()
    container = build_container(settings, registry=AgentRegistry(executors))
    return TestClient(create_app(settings, container=container))


def test_stream_returns_thread_header_matching_first_frame() -> None:
    executor = FakeAgentExecutor(events=[{"call_model": {"messages": [{"content": "Hello", "type": "ai"}]}}])
    client = _client({"memory-agent": executor})

    response = client.post(STREAM_URL, json={"messages": [{"content": "Hi", "type": "human"}]})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache"
    thread_id = response.headers["x-thread-id"]
    assert UUID4_PATTERN.match(thread_id)
    frames = decode_sse_text(response.text)
    assert frames[0] == {"threadId": thread_id}
    assert frames[-1] == {"__end__": True}


def test_stream_uses_configured_thread_header_name() -> None:
    client = _client({"memory-agent": FakeAgentExecutor()}, Settings(THREAD_ID_HEADER="x-conversation"))

    response = client.post(STREAM_URL, json={"messages": [], "threadId": "t-3"})

    assert response.headers["x-conversation"] == "t-3"


def test_stream_unknown_agent_returns_not_found() -> None:
    client = _client({"memory-agent": FakeAgentExecutor()})

    response = client.post("/api/agents/unknown/stream", json={"messages": []})

    assert response.status_code == 404
    assert response.json() == {"error": 'Agent "unknown" not found'}


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"content": b"{not json", "headers": {"content-type": "application/json"}}, "Invalid JSON in request body"),
        ({"json": {"threadId": "t-1"}}, "Messages array is required"),
        ({"json": ["Hi"]}, "Request body must be a JSON object"),
    ],
)
def test_stream_rejects_bad_requests(kwargs, message) -> None:
    executor = FakeAgentExecutor()
    client = _client({"memory-agent": executor})

    response = client.post(STREAM_URL, **kwargs)

    assert response.status_code == 400
    assert response.json() == {"error": message}
    assert executor.calls == []


def test_stream_with_empty_agent_id_is_rejected() -> None:
    executor = FakeAgentExecutor()
    client = _client({"memory-agent": executor})

    response = client.post("/api/agents//stream", json={"messages": []})

    assert response.status_code == 400
    assert response.json() == {"error": "Agent ID is required"}
    assert executor.calls == []


def test_stream_logs_agent_and_thread(caplog) -> None:
    client = _client({"memory-agent": FakeAgentExecutor()})

    with caplog.at_level(logging.INFO, logger=agents_router.__name__):
        client.post(STREAM_URL, json={"messages": [], "threadId": "t-4"})

    records = [record for record in caplog.records if record.getMessage() == "streaming agent response"]
    assert [(record.agent_id, record.thread_id) for record in records] == [("memory-agent", "t-4")]


def test_stream_executor_failure_is_reported_in_band() -> None:
    executor = FakeAgentExecutor(fail_with=RuntimeError("model exploded"))
    client = _client({"memory-agent": executor})

    response = client.post(STREAM_URL, json={"messages": [{"content": "Hi", "type": "human"}]})

    assert response.status_code == 200
    assert decode_sse_text(response.text)[1:] == [{"error": "model exploded"}]


def test_stream_runs_memory_agent_in_mock_mode(tmp_path) -> None:
    messages_file = tmp_path / "messages.md"
    messages_file.write_text("mock reply\n", encoding="utf-8")
    settings = Settings(AGENTS_USE_MOCK=True, AGENTS_MOCK_MESSAGES_FILE=str(messages_file))
    client = TestClient(create_app(settings, container=build_container(settings)))

    response = client.post(STREAM_URL, json={"messages": [{"content": "Hi", "type": "human"}]})

    frames = decode_sse_text(response.text)
    model_messages = frames[1]["call_model"]["messages"]
    assert model_messages[0]["kwargs"]["content"] == "mock reply"
    assert frames[-1] == {"__end__": True}


def test_list_agents_returns_registered_agents() -> None:
    client = _client({"memory-agent": FakeAgentExecutor(), "react-agent": FakeAgentExecutor()})

    response = client.get("/api/agents")

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [(agent["id"], agent["name"]) for agent in body["agents"]] == [
        ("memory-agent", "Memory Agent"),
        ("react-agent", "React Agent"),
    ]


@pytest.mark.asyncio
async def test_list_agents_resolves_registry_from_container() -> None:
    registry = AgentRegistry({"custom-agent": FakeAgentExecutor()})
    container = build_test_container({AgentRegistry: registry})

    response = await agents_router.list_agents(request=build_test_request(container))

    assert response.count == 1
    assert response.agents[0].id == "custom-agent"
    assert response.agents[0].name == "custom-agent"


def test_health_endpoints() -> None:
    client = _client({"memory-agent": FakeAgentExecutor()})

    assert client.get("/healthz").json() == {"status": "ok"}
    assert client.get("/readyz").json() == {"status": "ok", "agents": 1}


def test_readyz_reports_degraded_without_agents() -> None:
    client = _client({})

    assert client.get("/readyz").json() == {"status": "degraded", "agents": 0}
