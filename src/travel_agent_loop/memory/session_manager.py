from __future__ import annotations

import json
import sqlite3
from uuid import uuid4

from loguru import logger

from travel_agent_loop.memory.events import EventEmitter, utc_now
from travel_agent_loop.memory.models import DataType, Message, Role, Session, SessionSummary
from travel_agent_loop.memory.store import MemoryStore

DEFAULT_TITLE = "New Chat"


class SessionManager:
    """Durable, append-only conversation log keyed by session id.

    Every mutation runs in its own SQLite transaction and is committed before
    the method returns. Callers that read-modify-append hold the session's
    lock from ``SessionLocks``.
    """

    def __init__(self, store: MemoryStore, events: EventEmitter):
        self._store = store
        self._events = events

    def create_session(self, session_id: str | None = None) -> Session:
        sid = session_id or str(uuid4())
        now = utc_now()
        with self._store.transaction():
            self._store.execute(
                "INSERT INTO sessions (id, title, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (sid, DEFAULT_TITLE, now, now),
            )
            self._events.emit(sid, "session.created", {"session_id": sid})
        logger.info(f"Created session {sid}")
        return Session(id=sid, title=DEFAULT_TITLE, created_at=now)

    def get_session(self, session_id: str) -> Session | None:
        row = self._store.execute(
            "SELECT id, title, created_at FROM sessions WHERE id = ? LIMIT 1",
            (session_id,),
        ).fetchone()
        if row is None:
            return None
        return Session(
            id=row["id"],
            title=row["title"],
            created_at=row["created_at"],
            messages=self.load_messages(session_id),
        )

    def load_or_create(self, session_id: str) -> tuple[Session, bool]:
        """Return the session and whether this call created it."""
        session = self.get_session(session_id)
        if session is not None:
            return session, False
        try:
            return self.create_session(session_id), True
        except sqlite3.IntegrityError:
            # Created by another writer between the read and the insert.
            session = self.get_session(session_id)
            if session is None:
                raise
            return session, False

    def list_sessions(self, *, limit: int | None = None) -> list[SessionSummary]:
        query = "SELECT id, title, created_at FROM sessions ORDER BY created_at DESC, rowid DESC"
        params: tuple = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (max(1, limit),)
        rows = self._store.execute(query, params).fetchall()
        return [SessionSummary(id=r["id"], title=r["title"], created_at=r["created_at"]) for r in rows]

    def append_message(self, session_id: str, message: Message) -> int:
        data_json = None
        data_type = None
        if message.data is not None and message.data_type is not None:
            data_json = json.dumps(message.data, ensure_ascii=False)
            data_type = str(DataType(message.data_type))

        now = utc_now()
        with self._store.transaction():
            exists = self._store.execute(
                "SELECT 1 FROM sessions WHERE id = ? LIMIT 1",
                (session_id,),
            ).fetchone()
            if exists is None:
                raise ValueError(f"Session does not exist: {session_id}")

            row = self._store.execute(
                "SELECT COALESCE(MAX(seq), 0) AS max_seq FROM messages WHERE session_id = ?",
                (session_id,),
            ).fetchone()
            next_seq = int(row["max_seq"]) + 1
            self._store.execute(
                """
                INSERT INTO messages (id, session_id, seq, role, content, data_json, data_type, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (str(uuid4()), session_id, next_seq, str(Role(message.role)), message.content, data_json, data_type, now),
            )
            self._store.execute("UPDATE sessions SET updated_at = ? WHERE id = ?", (now, session_id))
            self._events.emit(
                session_id,
                "message.appended",
                {"seq": next_seq, "role": str(message.role), "data_type": data_type},
            )
        return next_seq

    def load_messages(self, session_id: str) -> list[Message]:
        rows = self._store.execute(
            """
            SELECT role, content, data_json, data_type
            FROM messages
            WHERE session_id = ?
            ORDER BY seq ASC
            """,
            (session_id,),
        ).fetchall()
        return [
            Message(
                role=Role(row["role"]),
                content=row["content"],
                data=json.loads(row["data_json"]) if row["data_json"] is not None else None,
                data_type=DataType(row["data_type"]) if row["data_type"] is not None else None,
            )
            for row in rows
        ]

    def set_title_if_default(self, session_id: str, title: str) -> bool:
        """Replace the placeholder title. Returns False if the title was already set."""
        title = title.strip()
        if not title:
            return False
        with self._store.transaction():
            cursor = self._store.execute(
                "UPDATE sessions SET title = ?, updated_at = ? WHERE id = ? AND title = ?",
                (title, utc_now(), session_id, DEFAULT_TITLE),
            )
            updated = cursor.rowcount == 1
            if updated:
                self._events.emit(session_id, "session.titled", {"title": title})
        return updated

    def record_tool_call(
        self,
        session_id: str,
        *,
        tool_name: str,
        tool_input: dict,
        result_text: str,
        is_error: bool,
        tool_call_id: str | None = None,
    ) -> str:
        call_id = tool_call_id or str(uuid4())
        with self._store.transaction():
            self._store.execute(
                """
                INSERT OR REPLACE INTO tool_calls (id, session_id, tool_name, input_json, result_text, is_error, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    call_id,
                    session_id,
                    tool_name,
                    json.dumps(tool_input, ensure_ascii=True, default=str),
                    result_text,
                    1 if is_error else 0,
                    utc_now(),
                ),
            )
        return call_id
