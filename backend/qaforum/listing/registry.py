"""Per-client-session draft caches and listing engines."""
from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass, field
from threading import RLock
from typing import Callable, Optional

from ..db.repositories.base import RecordStoreAdapter
from .drafts import DraftCache
from .engine import DEFAULT_FETCH_LIMIT, ListingEngine
from .pagination import PAGE_SIZE

DEFAULT_MAX_SESSIONS = 1000
DEFAULT_SESSION_TTL = 3600.0


@dataclass
class ClientSession:
    id: str
    drafts: DraftCache
    engine: ListingEngine
    last_seen: float = field(default=0.0, compare=False)


class SessionRegistry:
    """Least-recently-used sessions, each dropped after ``ttl_seconds`` without a request.

    Dropping a session drops its drafts; a later request with the same id
    starts over with an empty cache.
    """

    def __init__(
        self,
        store: RecordStoreAdapter,
        *,
        page_size: int = PAGE_SIZE,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        ttl_seconds: Optional[float] = DEFAULT_SESSION_TTL,
        now_fn: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_sessions <= 0:
            raise ValueError(f"max_sessions must be positive, got {max_sessions}")
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive or None, got {ttl_seconds}")
        self.store = store
        self.page_size = page_size
        self.fetch_limit = fetch_limit
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self._now = now_fn
        self._lock = RLock()
        self._sessions: OrderedDict[str, ClientSession] = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._sessions)

    def get(self, session_id: str) -> ClientSession:
        """Return the live session for ``session_id``, creating it when missing or expired."""
        with self._lock:
            session = self.peek(session_id)
            if session is None:
                drafts = DraftCache()
                engine = ListingEngine(
                    self.store, drafts, page_size=self.page_size, fetch_limit=self.fetch_limit
                )
                session = ClientSession(id=session_id, drafts=drafts, engine=engine, last_seen=self._now())
                self._sessions[session_id] = session
                self._purge_expired()
                while len(self._sessions) > self.max_sessions:
                    self._sessions.popitem(last=False)
            return session

    def peek(self, session_id: Optional[str]) -> Optional[ClientSession]:
        """Return the live session for ``session_id`` without creating one."""
        if session_id is None:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            now = self._now()
            if self._expired(session, now):
                del self._sessions[session_id]
                return None
            session.last_seen = now
            self._sessions.move_to_end(session_id)
            return session

    def end(self, session_id: str) -> bool:
        """Tear down a session; its drafts are gone for good."""
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def _expired(self, session: ClientSession, now: float) -> bool:
        return self.ttl_seconds is not None and now - session.last_seen >= self.ttl_seconds

    def _purge_expired(self) -> None:
        now = self._now()
        for sid in [sid for sid, s in self._sessions.items() if self._expired(s, now)]:
            del self._sessions[sid]
