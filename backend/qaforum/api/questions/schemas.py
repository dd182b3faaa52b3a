"""Pydantic request/response schemas for Questions and Listing API."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ...domain.question import Question
from ...listing.query import ListingState


class QuestionCreateIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list, max_length=10)


class QuestionUpdateIn(BaseModel):
    title: Optional[str] = Field(default=None, max_length=500)
    content: Optional[str] = None
    tags: Optional[List[str]] = Field(default=None, max_length=10)


class QuestionOut(BaseModel):
    id: str
    title: str
    content: str
    author_id: str
    tags: List[str]
    created_at: datetime
    updated_at: datetime
    answer_count: int
    vote_score: int

    @classmethod
    def from_domain(cls, q: Question) -> "QuestionOut":
        return cls(
            id=q.id,
            title=q.title,
            content=q.content,
            author_id=q.author_id,
            tags=list(q.tags),
            created_at=q.created_at,
            updated_at=q.updated_at,
            answer_count=q.answer_count,
            vote_score=q.vote_score,
        )


class ListingQueryIn(BaseModel):
    sort_by: str = "newest"
    tag: Optional[str] = None
    search: Optional[str] = None


class ListingStateOut(BaseModel):
    status: str
    items: List[QuestionOut]
    is_loading: bool
    is_loading_more: bool
    has_more: bool
    total: int
    page: int
    store_available: bool
    error: Optional[str] = None
    sort_by: Optional[str] = None
    tag: Optional[str] = None
    search: Optional[str] = None

    @classmethod
    def from_state(cls, state: ListingState) -> "ListingStateOut":
        params = state.params
        return cls(
            status=state.status.value,
            items=[QuestionOut.from_domain(q) for q in state.items],
            is_loading=state.is_loading,
            is_loading_more=state.is_loading_more,
            has_more=state.has_more,
            total=state.total,
            page=state.context.page if state.context else 0,
            store_available=state.store_available,
            error=state.error.value if state.error else None,
            sort_by=params.sort_by.value if params else None,
            tag=params.tag_filter if params else None,
            search=params.search_text if params else None,
        )
