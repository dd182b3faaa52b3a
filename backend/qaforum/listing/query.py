"""Query parameters, query context and observable listing state."""
from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..domain.question import Question
from ..errors import InvalidQueryParameter


class SortBy(str, enum.Enum):
    NEWEST = "newest"
    UNANSWERED = "unanswered"
    TRENDING = "trending"
    POPULAR = "popular"

    @classmethod
    def parse(cls, value: "str | SortBy") -> "SortBy":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidQueryParameter(f"unknown sort mode: {value!r}") from None


class ListingStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADING_MORE = "loading_more"
    READY = "ready"
    ERROR = "error"


class ErrorKind(str, enum.Enum):
    STORE_UNAVAILABLE = "store_unavailable"


@dataclass(frozen=True, slots=True)
class QueryParams:
    sort_by: SortBy = SortBy.NEWEST
    tag_filter: Optional[str] = None
    search_text: Optional[str] = None

    @classmethod
    def create(
        cls,
        sort_by: "str | SortBy" = SortBy.NEWEST,
        tag_filter: Optional[str] = None,
        search_text: Optional[str] = None,
    ) -> "QueryParams":
        if tag_filter is not None:
            if not isinstance(tag_filter, str) or any(ch.isspace() for ch in tag_filter):
                raise InvalidQueryParameter(f"malformed tag filter: {tag_filter!r}")
        if search_text is not None and not isinstance(search_text, str):
            raise InvalidQueryParameter(f"malformed search text: {search_text!r}")
        return cls(
            sort_by=SortBy.parse(sort_by),
            tag_filter=tag_filter or None,
            search_text=search_text or None,
        )


@dataclass(frozen=True, slots=True)
class QueryContext:
    """One request of one query: parameters, page and the token that identifies it."""

    params: QueryParams
    page: int
    token: int

    def next_page(self, token: int) -> "QueryContext":
        return replace(self, page=self.page + 1, token=token)


@dataclass(frozen=True, slots=True)
class ListingState:
    status: ListingStatus = ListingStatus.IDLE
    context: Optional[QueryContext] = None
    items: Tuple[Question, ...] = ()
    has_more: bool = False
    total: int = 0
    store_available: bool = True
    error: Optional[ErrorKind] = None

    @property
    def is_loading(self) -> bool:
        return self.status is ListingStatus.LOADING

    @property
    def is_loading_more(self) -> bool:
        return self.status is ListingStatus.LOADING_MORE

    @property
    def params(self) -> Optional[QueryParams]:
        return self.context.params if self.context else None
