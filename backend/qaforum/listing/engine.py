"""Listing & ranking engine: merge, filter, rank and paginate per query.

State machine per engine (one engine per client session)::

    IDLE -> LOADING(page=1) -> READY | ERROR
    READY(has_more) -> LOADING_MORE(page=n+1) -> READY
    any -> LOADING(page=1)            on run_query with new parameters

The store fetch is the only suspension point. Each request carries a token;
a response whose token is no longer the active one is dropped.

Async views of one session may run on different threads (one event loop per
request), so installing a request and settling its response each happen
under the engine lock.
"""
from __future__ import annotations

import asyncio
import itertools
import threading
from dataclasses import replace
from typing import List, Optional, Sequence

from loguru import logger

from ..db.repositories.base import FetchRange, ListResult, QuestionFilters, RecordStoreAdapter
from ..domain.question import Question
from ..errors import InvalidListingTransition, StaleResponse, StoreUnavailable
from .drafts import DraftCache
from .filters import filter_questions
from .merge import merge_questions
from .pagination import PAGE_SIZE, Page, paginate
from .query import ErrorKind, ListingState, ListingStatus, QueryContext, QueryParams
from .ranking import rank_questions

# records requested from the store per call; a listing reads every batch
DEFAULT_FETCH_LIMIT = 500


class ListingEngine:
    def __init__(
        self,
        store: RecordStoreAdapter,
        drafts: DraftCache,
        *,
        page_size: int = PAGE_SIZE,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
    ) -> None:
        if fetch_limit < 1:
            raise ValueError(f"fetch_limit must be positive, got {fetch_limit}")
        self.store = store
        self.drafts = drafts
        self.page_size = page_size
        self.fetch_limit = fetch_limit
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()
        self._state = ListingState()

    @property
    def state(self) -> ListingState:
        return self._state

    async def run_query(self, params: QueryParams) -> ListingState:
        """Start page 1 of ``params``, discarding whatever was listed before."""
        with self._lock:
            previous = self._state
            context = QueryContext(params=params, page=1, token=next(self._tokens))
            self._state = ListingState(status=ListingStatus.LOADING, context=context)
        return await self._execute(context, previous)

    async def load_more(self) -> ListingState:
        with self._lock:
            current = self._state
            if current.status is not ListingStatus.READY or not current.has_more or current.context is None:
                raise InvalidListingTransition(
                    f"load more needs a ready listing with more pages (status={current.status.value})"
                )
            context = current.context.next_page(next(self._tokens))
            self._state = replace(current, status=ListingStatus.LOADING_MORE, context=context)
        return await self._execute(context, current)

    async def refresh(self) -> ListingState:
        """Re-run the active parameters from page 1, e.g. after a draft changed."""
        params: Optional[QueryParams] = self._state.params
        if params is None:
            return self._state
        return await self.run_query(params)

    async def _execute(self, context: QueryContext, previous: ListingState) -> ListingState:
        try:
            result = await self._fetch(context)
        except StaleResponse:
            logger.debug("dropping stale listing response (token={})", context.token)
            return self._state
        except Exception:
            self._restore(context, previous)
            raise
        with self._lock:
            if not self._is_current(context):
                logger.debug("dropping stale listing response (token={})", context.token)
                return self._state
            try:
                self._state = self._settle(context, result)
            except Exception:
                # keep the last good listing visible
                self._state = previous
                raise
            return self._state

    def _restore(self, context: QueryContext, previous: ListingState) -> None:
        with self._lock:
            if self._is_current(context):
                self._state = previous

    async def _fetch(self, context: QueryContext) -> ListResult:
        """Read every batch the store holds for the query's filters.

        Ranking and ``has_more`` need the whole filtered set, so a partial
        read counts as unavailable.
        """
        params = context.params
        filters = QuestionFilters(
            tag=params.tag_filter,
            search_text=params.search_text,
            sort_hint=params.sort_by.value,
        )
        records: List[Question] = []
        window = FetchRange(offset=0, limit=self.fetch_limit)
        while True:
            try:
                batch = await asyncio.to_thread(self.store.list_questions, filters, window)
            except StoreUnavailable as exc:
                logger.warning("record store unavailable, listing drafts only: {}", exc)
                return ListResult.unavailable()
            if not batch.is_available:
                return ListResult.unavailable()
            records.extend(batch.records)
            if len(batch.records) < window.limit:
                return ListResult(records=tuple(records))
            self._ensure_current(context)
            window = FetchRange(offset=window.offset + window.limit, limit=window.limit)

    def _is_current(self, context: QueryContext) -> bool:
        active = self._state.context
        return active is not None and active.token == context.token

    def _ensure_current(self, context: QueryContext) -> None:
        if not self._is_current(context):
            raise StaleResponse(f"token {context.token} superseded")

    def _settle(self, context: QueryContext, result: ListResult) -> ListingState:
        drafts = self.drafts.snapshot()
        current = self._state
        shown = current.items if context.page > 1 else ()
        if context.page > 1 and result.is_available != current.store_available:
            # the shown pages were cut from a different ranking; appending would skip or repeat records
            logger.warning("store availability changed while loading more; listing ends at page {}", context.page - 1)
            return replace(
                current,
                status=ListingStatus.READY,
                context=replace(context, page=context.page - 1),
                has_more=False,
                store_available=result.is_available,
            )
        if not result.is_available and not drafts:
            return ListingState(
                status=ListingStatus.ERROR,
                context=context,
                items=shown,
                total=len(shown),
                store_available=False,
                error=ErrorKind.STORE_UNAVAILABLE,
            )
        page = self.compute_page(result, context, drafts)
        return ListingState(
            status=ListingStatus.READY,
            context=context,
            items=shown + page.items,
            has_more=page.has_more,
            total=page.total,
            store_available=result.is_available,
        )

    def compute_page(
        self,
        result: ListResult,
        context: QueryContext,
        drafts: Optional[Sequence[Question]] = None,
    ) -> Page:
        """Merge -> filter -> rank -> paginate, a pure function of its inputs and the draft snapshot."""
        params = context.params
        if drafts is None:
            drafts = self.drafts.snapshot()
        merged = merge_questions(result.records, drafts)
        filtered = filter_questions(merged, tag=params.tag_filter, search_text=params.search_text)
        ranked = rank_questions(filtered, params.sort_by)
        return paginate(ranked, context.page, self.page_size)
