from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class Role(StrEnum):
    USER = "user"
    MODEL = "model"


class DataType(StrEnum):
    FLIGHTS = "flights"
    HOTELS = "hotels"
    ACTIVITIES = "activities"
    OFFERS = "offers"


@dataclass(frozen=True)
class Message:
    role: Role
    content: str
    data: Any = None
    data_type: DataType | None = None


@dataclass
class Session:
    id: str
    title: str
    created_at: str
    messages: list[Message] = field(default_factory=list)


@dataclass(frozen=True)
class SessionSummary:
    id: str
    title: str
    created_at: str
