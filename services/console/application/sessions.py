"""Per-browser console sessions, keyed by a cookie and expired by TTL."""

import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from cachetools import TTLCache

from services.console.application.state import Console

COOKIE_NAME = "orderdesk_session"


@dataclass
class ConsoleSession:
    session_id: str
    console: Console
    is_new: bool


class SessionStore:
    def __init__(self, console_factory: Callable[[], Console], maxsize: int = 1024, ttl: float = 8 * 60 * 60):
        self.console_factory = console_factory
        self.ttl = ttl
        self._sessions: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)

    def __len__(self) -> int:
        return len(self._sessions)

    def resolve(self, session_id: Optional[str]) -> ConsoleSession:
        """
        Return the session for ``session_id``; an unknown or expired id gets a
        fresh console, as a page reload would.
        """
        console = self._sessions.get(session_id) if session_id else None
        is_new = console is None
        if is_new:
            session_id = uuid.uuid4().hex
            console = self.console_factory()
        # Re-inserting restarts the TTL
        self._sessions[session_id] = console
        return ConsoleSession(session_id=session_id, console=console, is_new=is_new)
