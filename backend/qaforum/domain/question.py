"""Domain dataclasses for questions and answers (DB-agnostic)."""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Tuple

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

TAG_COLORS: Tuple[str, ...] = (
    "blue",
    "green",
    "purple",
    "yellow",
    "pink",
    "indigo",
)

VOTE_TYPES: Tuple[str, ...] = ("up", "down")
NOTIFICATION_TYPES: Tuple[str, ...] = ("answer", "accepted")

_WHITESPACE = re.compile(r"\s+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def epoch_ms(ts: datetime) -> int:
    """Milliseconds since the epoch as an exact integer."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return (ts - EPOCH) // timedelta(milliseconds=1)


def parse_timestamp(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(value)
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def slugify_tag(label: str) -> str:
    return _WHITESPACE.sub("-", label.strip().lower())


def tag_color(slug: str) -> str:
    return TAG_COLORS[len(slug) % len(TAG_COLORS)]


@dataclass(frozen=True, slots=True)
class Tag:
    slug: str
    color: str

    @classmethod
    def from_label(cls, label: str) -> "Tag":
        slug = slugify_tag(label)
        return cls(slug=slug, color=tag_color(slug))


@dataclass(frozen=True, slots=True)
class Question:
    id: str
    title: str
    content: str
    author_id: str
    created_at: datetime
    updated_at: datetime
    tags: Tuple[str, ...] = ()
    answer_count: int = 0
    vote_score: int = 0

    def with_changes(self, **fields) -> "Question":
        if "tags" in fields:
            fields["tags"] = tuple(fields["tags"])
        return replace(self, **fields)


@dataclass(frozen=True, slots=True)
class Answer:
    id: str
    question_id: str
    content: str
    author_id: str
    created_at: datetime
    updated_at: datetime
    vote_score: int = 0
    is_accepted: bool = False

    def with_changes(self, **fields) -> "Answer":
        return replace(self, **fields)


@dataclass(frozen=True, slots=True)
class Vote:
    answer_id: str
    user_id: str
    vote_type: str

    @property
    def weight(self) -> int:
        return 1 if self.vote_type == "up" else -1


@dataclass(frozen=True, slots=True)
class Notification:
    id: str
    recipient_id: str
    message: str
    type: str
    link: str
    created_at: datetime = field(default_factory=utcnow)
    is_read: bool = False
