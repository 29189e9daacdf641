from __future__ import annotations

from langchain_core.messages import AIMessage, AIMessageChunk, ToolMessage
import pytest

from agent_stream.client.frames import decode_line, extract_messages, parse_frame
from agent_stream.client.messages import normalize_message
from agent_stream.client.reconcile import merge_messages
from agent_stream.core.errors import FrameParseError
from agent_stream.services.sse import encode_frame, end_frame, error_frame, thread_frame


def test_decode_line_ignores_non_data_lines() -> None:
    assert decode_line("") is None
    assert decode_line(": ping") is None
    assert decode_line("data:{}") is None


@pytest.mark.parametrize("line", ["data: {oops", "data: 42", "data: null"])
def test_decode_line_rejects_bad_payloads(line: str) -> None:
    with pytest.raises(FrameParseError):
        decode_line(line)


def test_encoded_frames_decode_back() -> None:
    frames = [thread_frame("t-1"), error_frame("boom"), end_frame(), encode_frame({"messages": []})]

    decoded = [decode_line(frame.rstrip("\n")) for frame in frames]

    assert decoded == [{"threadId": "t-1"}, {"error": "boom"}, {"__end__": True}, {"messages": []}]
    assert all(frame.endswith("\n\n") for frame in frames)


def test_extract_messages_prefers_top_level_list() -> None:
    payload = {"messages": [{"content": "a"}], "agent": {"messages": [{"content": "b"}]}}

    assert extract_messages(payload) == [{"content": "a"}]


def test_extract_messages_scans_one_level_of_nesting() -> None:
    payload = {
        "call_model": {"messages": [{"content": "a"}]},
        "store_memory": {"messages": [{"content": "b"}]},
        "deep": {"inner": {"messages": [{"content": "c"}]}},
        "other": "value",
    }

    assert extract_messages(payload) == [{"content": "a"}, {"content": "b"}]


def test_extract_messages_without_messages_is_empty() -> None:
    assert extract_messages({"threadId": "t-1"}) == []


def test_parse_frame_classifies_control_keys() -> None:
    assert parse_frame({"threadId": "t-1"}).thread_id == "t-1"
    assert parse_frame({"threadId": ""}).thread_id is None
    assert parse_frame({"error": "boom"}).error == "boom"
    assert parse_frame({"__end__": True}).end is True
    assert parse_frame({"end": True}).end is True
    assert parse_frame({"end": "soon"}).end is False

    interrupt = parse_frame({"interrupt": {"question": "ok?"}})
    assert interrupt.has_interrupt is True
    assert interrupt.interrupt == {"question": "ok?"}
    assert parse_frame({"interrupt": None}).has_interrupt is False


def test_normalize_message_flattens_constructor_form() -> None:
    raw = {
        "lc": 1,
        "type": "constructor",
        "id": ["langchain", "schema", "messages", "AIMessage"],
        "kwargs": {"content": "Hello", "id": "m-1", "additional_kwargs": {"refusal": None, "content": "ignored"}},
    }

    assert normalize_message(raw) == {"content": "Hello", "id": "m-1", "refusal": None, "type": "ai"}


@pytest.mark.parametrize(
    ("class_name", "expected"),
    [("HumanMessage", "human"), ("ToolMessage", "tool"), ("SystemMessage", "system"), ("Unknown", "ai")],
)
def test_normalize_message_maps_constructor_class_names(class_name: str, expected: str) -> None:
    raw = {"lc": 1, "type": "constructor", "id": ["langchain", class_name], "kwargs": {"content": "x"}}

    assert normalize_message(raw)["type"] == expected


def test_normalize_message_maps_roles_and_rejects_non_objects() -> None:
    assert normalize_message({"role": "assistant", "content": "x"})["type"] == "ai"
    assert normalize_message({"role": "User", "content": "x"})["type"] == "human"
    assert normalize_message({"type": "tool", "role": "user", "content": "x"})["type"] == "tool"
    assert "type" not in normalize_message({"content": "x"})
    assert normalize_message("hello") is None


def _constructor(class_name: str, kwargs_type: str) -> dict:
    kwargs = {"content": "x", "type": kwargs_type}
    return {"lc": 1, "type": "constructor", "id": ["langchain", class_name], "kwargs": kwargs}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ({"type": "AIMessageChunk", "content": "x"}, "ai"),
        ({"type": "HumanMessageChunk", "content": "x"}, "human"),
        ({"type": "custom", "content": "x"}, "custom"),
        (_constructor("AIMessageChunk", "AIMessageChunk"), "ai"),
        (_constructor("HumanMessageChunk", "HumanMessageChunk"), "human"),
        (_constructor("Unknown", "ToolMessageChunk"), "tool"),
    ],
)
def test_normalize_message_collapses_chunk_types(raw: dict, expected: str) -> None:
    assert normalize_message(raw)["type"] == expected


def test_serialized_langchain_messages_merge_into_conversation() -> None:
    tool_call = {"name": "UpsertMemory", "args": {"content": "Likes tea"}, "id": "call-1"}
    frames = [
        encode_frame({"call_model": {"messages": [AIMessage(content="", tool_calls=[tool_call])]}}),
        encode_frame({"store_memory": {"messages": [ToolMessage(content="Stored memory mem-1", tool_call_id="call-1")]}}),
        encode_frame({"call_model": {"messages": [AIMessageChunk(content="Noted")]}}),
        encode_frame({"call_model": {"messages": [AIMessageChunk(content="Noted, you like tea.")]}}),
    ]

    conversation = [{"content": "I like tea", "type": "human"}]
    batches = []
    for encoded in frames:
        frame = parse_frame(decode_line(encoded.rstrip("\n")))
        batch = [normalize_message(message) for message in frame.messages]
        batches.append([message["type"] for message in batch])
        conversation = merge_messages(conversation, batch)

    assert batches == [["ai"], ["tool"], ["ai"], ["ai"]]
    assert [(message["type"], message["content"]) for message in conversation] == [
        ("human", "I like tea"),
        ("tool", "Stored memory mem-1"),
        ("ai", "Noted, you like tea."),
    ]
    assert conversation[1]["tool_call_id"] == "call-1"
