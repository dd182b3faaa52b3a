"""SQLAlchemy engine and session factory initialization."""
from __future__ import annotations

from flask import Flask
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def build_engine(url: str, *, echo: bool = False, pool_size: int = 10, max_overflow: int = 20):
    if url.startswith("sqlite"):
        # one shared connection so worker threads see the same database
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
    )


class Database:
    def __init__(self) -> None:
        self.engine = None
        self.session_factory = None

    def init_app(self, app: Flask) -> None:
        url: str = app.config["DATABASE_URL"]
        echo: bool = app.config.get("SQL_ECHO", False)
        pool_size: int = app.config.get("POOL_SIZE", 10)
        max_overflow: int = app.config.get("MAX_OVERFLOW", 20)

        self.engine = build_engine(url, echo=echo, pool_size=pool_size, max_overflow=max_overflow)
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False, autoflush=False)


db = Database()
