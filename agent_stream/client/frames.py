"""Decoding of SSE data lines into typed frames."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any

from agent_stream.core.errors import FrameParseError
from agent_stream.services.sse import DATA_PREFIX

_END_KEYS = ("__end__", "end")


@dataclass(frozen=True)
class Frame:
    thread_id: str | None = None
    messages: list[Any] = field(default_factory=list)
    has_interrupt: bool = False
    interrupt: Any = None
    error: str | None = None
    end: bool = False


def decode_line(line: str) -> dict[str, Any] | None:
    """Return the JSON object carried by a ``data:`` line, or ``None`` for other lines.

    Raises ``FrameParseError`` when the payload is not a JSON object.
    """

    if not line.startswith(DATA_PREFIX):
        return None
    raw = line[len(DATA_PREFIX):]
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise FrameParseError(f"Malformed frame: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise FrameParseError(f"Frame payload must be a JSON object, got {type(payload).__name__}")
    return payload


def extract_messages(payload: dict[str, Any]) -> list[Any]:
    """Collect messages from ``payload["messages"]`` or one level under any other key.

    Executors report messages under step-specific keys, for example
    ``{"call_model": {"messages": [...]}}``. Frames with neither shape carry no messages.
    """

    top_level = payload.get("messages")
    if isinstance(top_level, list):
        return list(top_level)

    nested: list[Any] = []
    for value in payload.values():
        if isinstance(value, dict) and isinstance(value.get("messages"), list):
            nested.extend(value["messages"])
    return nested


def parse_frame(payload: dict[str, Any]) -> Frame:
    thread_id = payload.get("threadId")
    error = payload.get("error")
    return Frame(
        thread_id=thread_id if isinstance(thread_id, str) and thread_id else None,
        messages=extract_messages(payload),
        has_interrupt=payload.get("interrupt") is not None,
        interrupt=payload.get("interrupt"),
        error=str(error) if error else None,
        end=any(payload.get(key) is True for key in _END_KEYS),
    )
