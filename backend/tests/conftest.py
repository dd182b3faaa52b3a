import threading
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from qaforum import create_app
from qaforum.config import TestingConfig
from qaforum.db.base import Base
from qaforum.db.repositories.base import ListResult
from qaforum.db.repositories.question_repo import SQLAlchemyRecordStore
from qaforum.db.repositories.question_repo_memory import InMemoryRecordStore
from qaforum.db.session import build_engine
from qaforum.domain.question import Answer, Question
from qaforum.errors import StoreUnavailable
from qaforum.listing.drafts import DraftCache
from sqlalchemy.orm import sessionmaker

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_question(qid, *, hours_ago=0, tags=(), answer_count=0, vote_score=0,
                  author_id="alice", title=None, content=None):
    ts = BASE_TIME - timedelta(hours=hours_ago)
    return Question(
        id=qid,
        title=title or f"Question {qid}",
        content=content or f"<p>Body of {qid}</p>",
        author_id=author_id,
        created_at=ts,
        updated_at=ts,
        tags=tuple(tags),
        answer_count=answer_count,
        vote_score=vote_score,
    )


def make_answer(aid, question_id, *, author_id="bob", hours_ago=0, vote_score=0, is_accepted=False):
    ts = BASE_TIME - timedelta(hours=hours_ago)
    return Answer(
        id=aid,
        question_id=question_id,
        content=f"answer {aid}",
        author_id=author_id,
        created_at=ts,
        updated_at=ts,
        vote_score=vote_score,
        is_accepted=is_accepted,
    )


def ids(questions):
    return [q.id for q in questions]


class UnavailableStore(InMemoryRecordStore):
    """Store whose backend is unreachable for every question call."""

    def list_questions(self, filters, window):
        return ListResult.unavailable()

    def get_question(self, question_id):
        raise StoreUnavailable("connection refused")

    def create_question(self, question):
        raise StoreUnavailable("connection refused")


class GatedStore(InMemoryRecordStore):
    """Blocks listing calls for a tag until its gate is opened."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.gates = {}
        self.calls = []

    def list_questions(self, filters, window):
        self.calls.append((filters, window))
        gate = self.gates.get(filters.tag)
        if gate is not None:
            assert gate.wait(timeout=5), "gate was never opened"
        return super().list_questions(filters, window)

    def gate(self, tag):
        event = threading.Event()
        self.gates[tag] = event
        return event


@pytest.fixture
def drafts():
    return DraftCache()


@pytest.fixture
def memory_store():
    return InMemoryRecordStore()


@pytest.fixture
def sql_store():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield SQLAlchemyRecordStore(sessionmaker(bind=engine, expire_on_commit=False, autoflush=False))
    engine.dispose()


@pytest.fixture(params=["memory", "sqlalchemy"])
def any_store(request):
    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("sql_store")


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def app(store):
    app = create_app(TestingConfig, store=store)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


def bearer(user_id):
    token = jwt.encode({"sub": user_id}, TestingConfig.JWT_SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}
