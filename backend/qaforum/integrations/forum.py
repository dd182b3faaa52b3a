"""Forum extension: the record store and client sessions for one Flask app."""
from __future__ import annotations

import uuid
from typing import Optional

from flask import Flask, session

from ..db.repositories.base import RecordStoreAdapter
from ..db.repositories.factory import record_store
from ..listing.registry import DEFAULT_MAX_SESSIONS, DEFAULT_SESSION_TTL, ClientSession, SessionRegistry

SESSION_KEY = "qaforum_sid"


class ForumExt:
    def __init__(self) -> None:
        self.store: Optional[RecordStoreAdapter] = None
        self.sessions: Optional[SessionRegistry] = None

    def init_app(self, app: Flask, store: Optional[RecordStoreAdapter] = None) -> None:
        self.store = store if store is not None else record_store(app.config)
        self.sessions = SessionRegistry(
            self.store,
            fetch_limit=app.config.get("LISTING_FETCH_LIMIT", 500),
            max_sessions=app.config.get("SESSION_MAX", DEFAULT_MAX_SESSIONS),
            ttl_seconds=app.config.get("SESSION_TTL_SECONDS", DEFAULT_SESSION_TTL),
        )
        app.extensions["qaforum"] = self

    def _registry(self) -> SessionRegistry:
        if self.sessions is None:
            raise RuntimeError("forum extension is not initialized; call init_app first")
        return self.sessions

    def client_session(self) -> ClientSession:
        """The caller's session, started (and its id set in the cookie) when absent."""
        registry = self._registry()
        sid = session.get(SESSION_KEY)
        if sid is None:
            sid = uuid.uuid4().hex
            session[SESSION_KEY] = sid
        return registry.get(sid)

    def existing_client_session(self) -> Optional[ClientSession]:
        return self._registry().peek(session.get(SESSION_KEY))

    def end_client_session(self) -> bool:
        registry = self._registry()
        sid = session.pop(SESSION_KEY, None)
        return registry.end(sid) if sid else False


forum_ext = ForumExt()
