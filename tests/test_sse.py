from __future__ import annotations

from langchain_core.messages import HumanMessage

from agent_stream.services.sse import encode_frame, end_frame, error_frame, thread_frame


def test_control_frames() -> None:
    assert thread_frame("t-1") == 'data: {"threadId": "t-1"}\n\n'
    assert error_frame("boom") == 'data: {"error": "boom"}\n\n'
    assert end_frame() == 'data: {"__end__": true}\n\n'


def test_encode_frame_serializes_langchain_messages() -> None:
    frame = encode_frame({"messages": [HumanMessage(content="Hi")]})

    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    assert '"lc": 1' in frame
    assert '"HumanMessage"' in frame
    assert "\n" not in frame[: -2]
