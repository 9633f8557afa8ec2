from __future__ import annotations

import contextvars
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from loguru import logger

from travel_agent_loop.agent_config import AgentConfig
from travel_agent_loop.history import annotate_utterance, to_model_messages
from travel_agent_loop.memory import DataType, Message, Role, SessionLocks, SessionManager
from travel_agent_loop.provider import LLMProvider
from travel_agent_loop.title_generator import TitleGenerator
from travel_agent_loop.tool_registry import ToolRegistry
from travel_agent_loop.turn_engine import TurnEngine

_active_session: contextvars.ContextVar[str | None] = contextvars.ContextVar("active_session", default=None)

_CLIENT_ROLES = {"user": Role.USER, "model": Role.MODEL, "assistant": Role.MODEL}


@dataclass
class ChatReply:
    text: str
    session_id: str
    title: str
    data: Any = None
    data_type: DataType | None = None

    @property
    def type(self) -> str:
        return "results" if self.data is not None else "message"


def parse_client_history(history: Sequence[Any] | None) -> list[Message]:
    """Messages from a client-held transcript; malformed entries are skipped."""
    messages: list[Message] = []
    for entry in history or []:
        if not isinstance(entry, dict):
            continue
        role = _CLIENT_ROLES.get(str(entry.get("role", "")).lower())
        content = entry.get("content")
        if role is None or not isinstance(content, str):
            continue
        data_type = None
        data = None
        if role is Role.MODEL and entry.get("data") is not None:
            try:
                data_type = DataType(entry.get("dataType"))
                data = entry["data"]
            except ValueError:
                pass
        messages.append(Message(role=role, content=content, data=data, data_type=data_type))
    return messages


class TravelAgent:
    def __init__(
        self,
        config: AgentConfig,
        *,
        provider: LLMProvider,
        registry: ToolRegistry,
        sessions: SessionManager,
        locks: SessionLocks,
        title_generator: TitleGenerator | None = None,
        today: Callable[[], date] = date.today,
    ):
        self._sessions = sessions
        self._locks = locks
        self._title_generator = title_generator
        self._today = today
        self._turn_engine = TurnEngine(
            provider=provider,
            model=config.model,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            system_prompt=config.system_prompt,
            registry=registry,
            max_tool_rounds=config.max_tool_rounds,
            max_tool_result_chars=config.max_tool_result_chars,
            model_timeout_seconds=config.model_timeout_seconds,
            tool_timeout_seconds=config.tool_timeout_seconds,
            on_record_tool_call=self._record_tool_call,
        )

    async def run(
        self,
        session_id: str,
        utterance: str,
        *,
        client_history: Sequence[Any] | None = None,
    ) -> ChatReply:
        utterance = utterance.strip()
        if not utterance:
            raise ValueError("utterance must not be empty")

        async with self._locks.hold(session_id):
            session, created = self._sessions.load_or_create(session_id)
            if created:
                replayed = parse_client_history(client_history)
                if replayed:
                    for message in replayed:
                        self._sessions.append_message(session_id, message)
                    session.messages.extend(replayed)
                    logger.info(f"Replayed {len(replayed)} client message(s) into new session {session_id}")

            history = to_model_messages(session.messages)
            self._sessions.append_message(session_id, Message(role=Role.USER, content=utterance))

            token = _active_session.set(session_id)
            try:
                result = await self._turn_engine.run(
                    history=history,
                    user_message=annotate_utterance(utterance, self._today()),
                )
            finally:
                _active_session.reset(token)

            self._sessions.append_message(
                session_id,
                Message(role=Role.MODEL, content=result.text, data=result.data, data_type=result.data_type),
            )

        if self._title_generator is not None:
            self._title_generator.maybe_generate_title(session_id)

        return ChatReply(
            text=result.text,
            session_id=session_id,
            title=session.title,
            data=result.data,
            data_type=result.data_type,
        )

    def _record_tool_call(
        self,
        *,
        tool_call_id: str,
        tool_name: str,
        tool_input: dict,
        result_text: str,
        is_error: bool,
    ) -> None:
        session_id = _active_session.get()
        if session_id is None:
            return
        self._sessions.record_tool_call(
            session_id,
            tool_name=tool_name,
            tool_input=tool_input,
            result_text=result_text,
            is_error=is_error,
            tool_call_id=tool_call_id,
        )
