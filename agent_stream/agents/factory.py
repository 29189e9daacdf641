from __future__ import annotations

from functools import partial
import logging
from pathlib import Path

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_openai import ChatOpenAI

from agent_stream.agents.base import AgentExecutor
from agent_stream.agents.langgraph_agent import GraphFactory, LangGraphAgent, ModelFactory
from agent_stream.agents.memory_agent import build_memory_graph
from agent_stream.agents.metadata import AGENT_METADATA, AgentMetadata
from agent_stream.agents.react_agent import build_react_graph
from agent_stream.core.settings import Settings

logger = logging.getLogger(__name__)

_MOCK_MESSAGE_DELIMITER = "\n\n--- message ---\n\n"


class AgentRegistry:
    """Maps agent ids to executors and their listing metadata."""

    def __init__(
        self,
        executors: dict[str, AgentExecutor],
        metadata: dict[str, AgentMetadata] | None = None,
    ) -> None:
        self._executors = dict(executors)
        self._metadata = metadata if metadata is not None else AGENT_METADATA

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._executors

    def get(self, agent_id: str) -> AgentExecutor | None:
        return self._executors.get(agent_id)

    def list_agents(self) -> list[tuple[str, AgentMetadata]]:
        return [
            (agent_id, self._metadata.get(agent_id) or AgentMetadata(name=agent_id))
            for agent_id in self._executors
        ]


def _load_mock_messages(messages_file: str) -> list[str]:
    path = Path(messages_file)
    raw_content = path.read_text(encoding="utf-8")
    parsed_messages = [chunk.strip() for chunk in raw_content.split(_MOCK_MESSAGE_DELIMITER)]
    messages = [message for message in parsed_messages if message]
    if not messages:
        raise ValueError(
            f"No mock messages found in {path}. Use delimiter {_MOCK_MESSAGE_DELIMITER!r} between messages."
        )
    return messages


def _build_model_factory(settings: Settings) -> ModelFactory:
    if settings.agents_use_mock:
        fake_responses = _load_mock_messages(messages_file=settings.agents_mock_messages_file)
        logger.info("using FakeListChatModel for agents", extra={"responses_count": len(fake_responses)})
        # Shared so responses keep cycling across requests.
        fake_model = FakeListChatModel(responses=fake_responses)
        return lambda _model_name: fake_model

    return partial(build_chat_model, settings)


def build_chat_model(settings: Settings, model_name: str) -> BaseChatModel:
    """Create a streaming chat model for ``model_name`` behind the model-provider gateway."""

    logger.debug("using model-provider chat model", extra={"model_alias": model_name})
    return ChatOpenAI(
        model=model_name,
        base_url=settings.model_provider_base_url,
        api_key=settings.model_provider_api_key,
        temperature=settings.model_temperature,
        streaming=True,
    )


def build_agent_registry(settings: Settings) -> AgentRegistry:
    """Create the registry of bundled agents with real or fake model backends."""

    model_factory = _build_model_factory(settings)
    bind_tools = not settings.agents_use_mock
    graph_factories: dict[str, GraphFactory] = {
        "memory-agent": partial(build_memory_graph, bind_tools=bind_tools),
        "react-agent": partial(build_react_graph, bind_tools=bind_tools),
    }
    executors: dict[str, AgentExecutor] = {
        agent_id: LangGraphAgent(
            name=agent_id,
            graph_factory=graph_factory,
            model_factory=model_factory,
            default_model=settings.default_model,
        )
        for agent_id, graph_factory in graph_factories.items()
    }
    logger.info("agent registry built", extra={"agents": sorted(executors), "use_mock": settings.agents_use_mock})
    return AgentRegistry(executors)
