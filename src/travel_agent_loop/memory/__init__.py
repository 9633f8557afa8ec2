from travel_agent_loop.memory.events import EventEmitter
from travel_agent_loop.memory.locks import SessionLocks
from travel_agent_loop.memory.models import DataType, Message, Role, Session, SessionSummary
from travel_agent_loop.memory.session_manager import DEFAULT_TITLE, SessionManager
from travel_agent_loop.memory.store import MemoryStore

__all__ = [
    "DEFAULT_TITLE",
    "DataType",
    "EventEmitter",
    "MemoryStore",
    "Message",
    "Role",
    "Session",
    "SessionLocks",
    "SessionManager",
    "SessionSummary",
]
