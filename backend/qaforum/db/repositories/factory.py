"""Record store factory (memory|sqlalchemy|supabase), resolved once per app."""
from __future__ import annotations

from typing import Any, Mapping

from .base import RecordStoreAdapter
from .question_repo import SQLAlchemyRecordStore
from .question_repo_memory import InMemoryRecordStore
from .question_repo_supabase import SupabaseRecordStore
from ..session import db
from ...data import demo_answers, demo_questions
from ...integrations.supabase_client import supabase_ext

BACKENDS = ("memory", "sqlalchemy", "supabase")


def record_store(config: Mapping[str, Any]) -> RecordStoreAdapter:
    backend = (config.get("QUESTION_STORE_BACKEND") or "memory").lower()
    if backend == "supabase":
        client = supabase_ext.client
        if client is None:
            raise RuntimeError("Supabase client is not initialized; set SUPABASE_URL and a key.")
        return SupabaseRecordStore(client)
    if backend == "sqlalchemy":
        if db.session_factory is None:
            raise RuntimeError("SQLAlchemy store requires an initialized database")
        return SQLAlchemyRecordStore(db.session_factory)
    if backend == "memory":
        if config.get("SEED_DEMO_DATA"):
            return InMemoryRecordStore(questions=demo_questions(), answers=demo_answers())
        return InMemoryRecordStore()
    raise RuntimeError(f"unknown QUESTION_STORE_BACKEND {backend!r}; expected one of {BACKENDS}")
