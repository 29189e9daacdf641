from __future__ import annotations

from collections.abc import Sequence

from agent_stream.client.messages import AI_TYPE, HUMAN_TYPE, has_content, message_type
from agent_stream.client.types import Message


def merge_messages(existing: Sequence[Message], incoming: Sequence[Message]) -> list[Message]:
    """Merge a batch of streamed messages into conversation state.

    Messages without content are dropped. The last AI message of the batch replaces the
    AI message of the current turn, or is appended when the turn has none yet; other
    messages are appended in batch order. Executors resend growing versions of the same
    reply, so this keeps exactly one AI message per turn.
    """

    valid = [message for message in incoming if has_content(message)]
    if not valid:
        return list(existing)

    merged = list(existing)
    ai_messages = [message for message in valid if message_type(message) == AI_TYPE]
    latest_ai = ai_messages[-1] if ai_messages else None
    replace_index = current_turn_ai_index(existing) if latest_ai is not None else None

    if replace_index is not None:
        merged[replace_index] = latest_ai  # type: ignore[assignment]

    for message in valid:
        if message_type(message) != AI_TYPE:
            merged.append(message)
        elif message is latest_ai and replace_index is None:
            merged.append(message)
    return merged


def current_turn_ai_index(messages: Sequence[Message]) -> int | None:
    """Index of the most recent AI message that follows the latest human message."""

    for index in range(len(messages) - 1, -1, -1):
        kind = message_type(messages[index])
        if kind == AI_TYPE:
            return index
        if kind == HUMAN_TYPE:
            return None
    return None
