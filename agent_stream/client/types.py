from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, TypedDict


class Message(TypedDict, total=False):
    id: str
    type: str
    content: Any


class SubmitPayload(TypedDict, total=False):
    messages: list[dict[str, Any]]


class SubmitOptions(TypedDict, total=False):
    configurable: dict[str, Any]


class StreamStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    ERRORED = "errored"
    ABORTED = "aborted"

    @property
    def is_loading(self) -> bool:
        return self in (StreamStatus.SUBMITTING, StreamStatus.STREAMING)


@dataclass(frozen=True)
class StreamValues:
    """Conversation state owned by the consumer."""

    messages: list[Message] = field(default_factory=list)
    ui: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class InterruptState:
    value: Any
    when: Literal["now"] = "now"


@dataclass(frozen=True)
class MessageMetadata:
    """Per-message branch metadata.

    Without a persistent checkpoint store ``first_seen_state``, ``branch`` and
    ``branch_options`` are always ``None``.
    """

    message_id: str
    first_seen_state: Any = None
    branch: str | None = None
    branch_options: list[str] | None = None


@dataclass(frozen=True)
class BranchTree:
    type: Literal["sequence"] = "sequence"
    items: tuple[Any, ...] = ()
