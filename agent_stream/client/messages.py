from __future__ import annotations

from typing import Any

from agent_stream.client.types import Message

AI_TYPE = "ai"
HUMAN_TYPE = "human"

_LC_CLASS_TYPES = {
    "AIMessage": AI_TYPE,
    "AIMessageChunk": AI_TYPE,
    "HumanMessage": HUMAN_TYPE,
    "HumanMessageChunk": HUMAN_TYPE,
    "SystemMessage": "system",
    "SystemMessageChunk": "system",
    "ToolMessage": "tool",
    "ToolMessageChunk": "tool",
}

_ROLE_TYPES = {
    "user": HUMAN_TYPE,
    "human": HUMAN_TYPE,
    "assistant": AI_TYPE,
    "ai": AI_TYPE,
    "system": "system",
    "tool": "tool",
}

# Chunk classes serialize their own class name as ``type``.
_TYPE_ALIASES = {**_LC_CLASS_TYPES, **_ROLE_TYPES}


def normalize_message(raw: Any) -> Message | None:
    """Flatten wire messages into ``{type, content, ...}`` dicts.

    Accepts LangChain constructor dicts (``{"lc": 1, "id": [..., "AIMessage"], "kwargs": {...}}``)
    and plain dicts keyed by ``type`` or ``role``. Chunk types such as ``AIMessageChunk``
    collapse onto their base type. Anything else yields ``None``.
    """

    if not isinstance(raw, dict):
        return None

    if raw.get("lc") and isinstance(raw.get("kwargs"), dict):
        return _from_constructor(raw)

    message: dict[str, Any] = dict(raw)
    message_type = _canonical_type(message.get("type")) or _ROLE_TYPES.get(str(message.get("role") or "").lower())
    if message_type:
        message["type"] = message_type
    return message  # type: ignore[return-value]


def _from_constructor(raw: dict[str, Any]) -> Message:
    kwargs: dict[str, Any] = raw["kwargs"]
    class_path = raw.get("id")
    class_name = class_path[-1] if isinstance(class_path, list) and class_path else ""

    message: dict[str, Any] = {key: value for key, value in kwargs.items() if key != "additional_kwargs"}
    additional = kwargs.get("additional_kwargs")
    if isinstance(additional, dict):
        for key, value in additional.items():
            message.setdefault(key, value)
    message["type"] = _LC_CLASS_TYPES.get(class_name) or _canonical_type(kwargs.get("type")) or AI_TYPE
    return message  # type: ignore[return-value]


def _canonical_type(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    return _TYPE_ALIASES.get(value, value)


def message_type(message: Message) -> str | None:
    return message.get("type")


def has_content(message: Message) -> bool:
    return bool(message.get("content"))
