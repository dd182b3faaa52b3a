"""Supabase clients as a Flask extension; the record store picks one at startup."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from flask import Flask
from supabase import Client, create_client


@dataclass
class SupabaseClients:
    anon: Optional[Client] = None
    service: Optional[Client] = None


def _connect(url: Optional[str], key: Optional[str]) -> Optional[Client]:
    return create_client(url, key) if url and key else None


class SupabaseExt:
    def __init__(self) -> None:
        self.clients = SupabaseClients()

    def init_app(self, app: Flask) -> None:
        # a re-created app must not inherit clients from an earlier config
        url = app.config.get("SUPABASE_URL")
        self.clients = SupabaseClients(
            anon=_connect(url, app.config.get("SUPABASE_ANON_KEY")),
            service=_connect(url, app.config.get("SUPABASE_SERVICE_ROLE_KEY")),
        )

    @property
    def client(self) -> Optional[Client]:
        """Service-role client when configured, else the anon client."""
        return self.clients.service or self.clients.anon

    def status(self) -> Dict[str, bool]:
        return {
            "anon_initialized": self.clients.anon is not None,
            "service_initialized": self.clients.service is not None,
        }


supabase_ext = SupabaseExt()
