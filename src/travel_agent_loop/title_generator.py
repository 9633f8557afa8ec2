from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from loguru import logger

from travel_agent_loop.memory import DEFAULT_TITLE, SessionLocks, SessionManager
from travel_agent_loop.provider import LLMProvider

TITLE_SOURCE_MESSAGES = 4
_MIN_MESSAGES = 2
_MAX_TITLE_CHARS = 80
_PROMPT = (
    "Summarize the following conversation into a very short, catchy title "
    '(max 4-5 words). Do not use quotes or "Title:". conversation:\n{history}'
)


def build_title_prompt(history: Sequence[Any]) -> str:
    entries = [m for m in history if isinstance(m, dict)][:TITLE_SOURCE_MESSAGES]
    lines = [f"{m.get('role', 'user')}: {m.get('content', '')}" for m in entries]
    return _PROMPT.format(history="\n".join(lines))


def clean_title(raw: str) -> str:
    title = raw.strip().splitlines()[0] if raw.strip() else ""
    if title.lower().startswith("title:"):
        title = title[len("title:"):]
    return title.strip().strip("\"'*").strip()[:_MAX_TITLE_CHARS]


class TitleGenerator:
    def __init__(
        self,
        *,
        provider: LLMProvider | None,
        model: str,
        sessions: SessionManager,
        locks: SessionLocks,
        max_tokens: int = 32,
        temperature: float = 0.3,
    ):
        self._provider = provider
        self._model = model
        self._sessions = sessions
        self._locks = locks
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._tasks: set[asyncio.Task] = set()

    async def generate_title(self, history: Sequence[Any]) -> str | None:
        """Stateless title for ``history`` (dicts with role/content). None on failure."""
        if self._provider is None or not history:
            return None
        try:
            raw = await self._provider.create_message(
                self._model,
                self._max_tokens,
                self._temperature,
                [{"role": "user", "content": build_title_prompt(history)}],
            )
        except Exception as ex:
            logger.error(f"Title generation failed: {type(ex).__name__}: {ex}")
            return None
        return clean_title(raw) or None

    def maybe_generate_title(self, session_id: str) -> asyncio.Task | None:
        """Schedule title generation for a session without waiting for it."""
        if self._provider is None:
            return None
        task = asyncio.create_task(self._run(session_id), name=f"title:{session_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, session_id: str) -> None:
        try:
            async with self._locks.hold(session_id):
                session = self._sessions.get_session(session_id)
            if session is None or session.title != DEFAULT_TITLE or len(session.messages) < _MIN_MESSAGES:
                return

            history = [{"role": str(m.role), "content": m.content} for m in session.messages[:TITLE_SOURCE_MESSAGES]]
            title = await self.generate_title(history)
            if not title:
                return

            async with self._locks.hold(session_id):
                updated = self._sessions.set_title_if_default(session_id, title)
            if updated:
                logger.info(f"Session {session_id} titled {title!r}")
        except Exception as ex:
            logger.error(f"Title task for session {session_id} failed: {type(ex).__name__}: {ex}")

    async def aclose(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    async def drain(self) -> None:
        """Wait for scheduled title tasks to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
