from __future__ import annotations

from typing import Any, Final

from langchain_core.load import dumps

DATA_PREFIX: Final = "data: "
END_FRAME: Final[dict[str, bool]] = {"__end__": True}


def encode_frame(payload: Any) -> str:
    """Serialize one frame as an SSE ``data:`` record.

    LangChain objects (messages, documents) are written in their constructor form,
    ``{"lc": 1, "type": "constructor", "id": [...], "kwargs": {...}}``.
    """

    return f"{DATA_PREFIX}{dumps(payload)}\n\n"


def thread_frame(thread_id: str) -> str:
    return encode_frame({"threadId": thread_id})


def error_frame(message: str) -> str:
    return encode_frame({"error": message})


def end_frame() -> str:
    return encode_frame(END_FRAME)
