"""Health check endpoints."""
from __future__ import annotations

from flask import Blueprint, current_app

from ...errors import ok
from ...integrations.forum import forum_ext
from ...integrations.supabase_client import supabase_ext


bp = Blueprint("health", __name__)


@bp.get("/")
def alive():
    return ok({"status": "ok"})


@bp.get("/store")
def store_status():
    return ok({
        "backend": current_app.config.get("QUESTION_STORE_BACKEND"),
        "store": type(forum_ext.store).__name__,
        "sessions": len(forum_ext.sessions or ()),
        "supabase": supabase_ext.status(),
    })
