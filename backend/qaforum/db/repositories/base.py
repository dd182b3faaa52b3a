"""Record store interface shared by every backend variant."""
from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple, Type, TypeVar

from ...domain.question import Answer, Notification, Question
from ...errors import StoreUnavailable

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True, slots=True)
class QuestionFilters:
    """Narrowing hints; backends may apply any subset of them."""

    tag: Optional[str] = None
    search_text: Optional[str] = None
    sort_hint: Optional[str] = None


@dataclass(frozen=True, slots=True)
class FetchRange:
    offset: int = 0
    limit: int = 10

    @property
    def end(self) -> int:
        """Inclusive upper bound, as PostgREST ranges expect."""
        return self.offset + self.limit - 1


@dataclass(frozen=True, slots=True)
class ListResult:
    records: Sequence[Question] = field(default_factory=tuple)
    is_available: bool = True

    @classmethod
    def unavailable(cls) -> "ListResult":
        return cls(records=(), is_available=False)


class RecordStoreAdapter(Protocol):
    def list_questions(self, filters: QuestionFilters, window: FetchRange) -> ListResult: ...

    def get_question(self, question_id: str) -> Optional[Question]: ...

    def create_question(self, question: Question) -> Question: ...

    def update_question(self, question_id: str, **fields) -> Optional[Question]: ...

    def delete_question(self, question_id: str) -> bool: ...

    def list_answers(self, question_id: str) -> List[Answer]: ...

    def get_answer(self, answer_id: str) -> Optional[Answer]: ...

    def create_answer(self, answer: Answer) -> Answer: ...

    def update_answer(self, answer_id: str, **fields) -> Optional[Answer]: ...

    def clear_accepted(self, question_id: str) -> None: ...

    def cast_vote(self, answer_id: str, user_id: str, vote_type: str) -> int: ...

    def list_notifications(self, recipient_id: str, limit: int = 20) -> List[Notification]: ...

    def create_notification(self, notification: Notification) -> Notification: ...

    def mark_notification_read(self, notification_id: str) -> bool: ...

    def mark_all_notifications_read(self, recipient_id: str) -> int: ...


def store_call(*faults: Type[BaseException]) -> Callable[[F], F]:
    """Translate backend faults raised by ``fn`` into :class:`StoreUnavailable`."""

    def decorate(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any):
            try:
                return fn(*args, **kwargs)
            except faults as exc:
                raise StoreUnavailable(f"{fn.__name__} failed: {exc}") from exc

        return wrapper  # type: ignore[return-value]

    return decorate


def sort_columns(sort_hint: Optional[str]) -> Tuple[str, ...]:
    """Columns (all descending) a backend orders by for a sort hint."""
    if sort_hint == "popular":
        return ("vote_score", "answer_count")
    return ("created_at",)
