from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from travel_agent_loop.memory import DataType, Message, Session, SessionSummary


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatRequest(_CamelModel):
    message: str | None = None
    session_id: str | None = None
    history: list[Any] | None = None


class ChatResponse(_CamelModel):
    type: Literal["results", "message"]
    content: str
    data: Any = None
    data_type: DataType | None = None
    session_id: str
    title: str


class GenerateTitleRequest(_CamelModel):
    history: list[Any] | None = None


class GenerateTitleResponse(_CamelModel):
    title: str | None


class MessageOut(_CamelModel):
    role: str
    content: str
    data: Any = None
    data_type: DataType | None = None

    @classmethod
    def from_message(cls, message: Message) -> MessageOut:
        return cls(role=str(message.role), content=message.content, data=message.data, data_type=message.data_type)


class SessionOut(_CamelModel):
    id: str
    title: str
    created_at: str
    messages: list[MessageOut] = Field(default_factory=list)

    @classmethod
    def from_session(cls, session: Session) -> SessionOut:
        return cls(
            id=session.id,
            title=session.title,
            created_at=session.created_at,
            messages=[MessageOut.from_message(m) for m in session.messages],
        )


class SessionSummaryOut(_CamelModel):
    id: str
    title: str
    created_at: str

    @classmethod
    def from_summary(cls, summary: SessionSummary) -> SessionSummaryOut:
        return cls(id=summary.id, title=summary.title, created_at=summary.created_at)


class HealthResponse(_CamelModel):
    status: str
    provider: str | None
    tools: list[str]
