from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from travel_agent_loop.memory.models import Message, Role
from travel_agent_loop.summarizer import summarize_for_context

_MODEL_ROLES = {Role.USER: "user", Role.MODEL: "assistant"}


def with_context_digest(message: Message) -> str:
    text = message.content
    if message.data is not None and message.data_type is not None:
        digest = summarize_for_context(message.data_type, message.data)
        text += f"\n\n[System Context: User saw these {message.data_type} results:\n{digest}]"
    return text


def append_text_turn(messages: list[dict], role: str, text: str) -> None:
    """Append a plain-text turn, merging into the previous turn if it has the same role."""
    if messages and messages[-1]["role"] == role and isinstance(messages[-1]["content"], str):
        messages[-1]["content"] += "\n\n" + text
    else:
        messages.append({"role": role, "content": text})


def to_model_messages(history: Iterable[Message]) -> list[dict]:
    """Project stored messages into provider-format turns.

    Turns with result data carry a digest instead of the payload. Blank turns
    (an empty final reply) are dropped because providers reject empty
    content. Adjacent turns with the same role are merged so roles keep
    alternating.
    """
    out: list[dict] = []
    for message in history:
        text = with_context_digest(message)
        if not text.strip():
            continue
        append_text_turn(out, _MODEL_ROLES[Role(message.role)], text)
    return out


def annotate_utterance(utterance: str, today: date | None = None) -> str:
    current = (today or date.today()).isoformat()
    return f"[System: Current Date is {current}] {utterance}"
