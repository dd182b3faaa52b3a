"""Pydantic request/response schemas for Answers API."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from ...domain.question import Answer


class AnswerCreateIn(BaseModel):
    content: str = Field(..., min_length=1)


class VoteIn(BaseModel):
    vote_type: Literal["up", "down"]


class AnswerOut(BaseModel):
    id: str
    question_id: str
    content: str
    author_id: str
    vote_score: int
    is_accepted: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, a: Answer) -> "AnswerOut":
        return cls(
            id=a.id,
            question_id=a.question_id,
            content=a.content,
            author_id=a.author_id,
            vote_score=a.vote_score,
            is_accepted=a.is_accepted,
            created_at=a.created_at,
            updated_at=a.updated_at,
        )
