import asyncio
import threading

import pytest
from conftest import GatedStore, UnavailableStore, ids, make_question

from qaforum.db.repositories.base import ListResult
from qaforum.db.repositories.question_repo_memory import InMemoryRecordStore
from qaforum.errors import InvalidListingTransition, InvalidQueryParameter, StoreUnavailable
from qaforum.listing.drafts import DraftCache
from qaforum.listing.engine import ListingEngine
from qaforum.listing.query import ErrorKind, ListingStatus, QueryParams


def _engine(questions=(), drafts=()):
    return ListingEngine(InMemoryRecordStore(questions=questions), DraftCache(drafts))


def _many(n, **kw):
    return [make_question(f"q{i:02d}", hours_ago=i, **kw) for i in range(n)]


@pytest.mark.asyncio
async def test_starts_idle():
    engine = _engine()
    assert engine.state.status is ListingStatus.IDLE
    assert engine.state.items == ()


@pytest.mark.asyncio
async def test_first_page_of_newest():
    engine = _engine(_many(25))
    state = await engine.run_query(QueryParams.create("newest"))
    assert state.status is ListingStatus.READY
    assert ids(state.items) == [f"q{i:02d}" for i in range(10)]
    assert state.has_more is True
    assert state.total == 25
    assert not state.is_loading and not state.is_loading_more


@pytest.mark.asyncio
async def test_load_more_appends_until_exhausted():
    engine = _engine(_many(25))
    await engine.run_query(QueryParams.create("newest"))
    second = await engine.load_more()
    assert len(second.items) == 20 and second.has_more is True
    third = await engine.load_more()
    assert ids(third.items) == [f"q{i:02d}" for i in range(25)]
    assert third.has_more is False
    assert third.context.page == 3

    with pytest.raises(InvalidListingTransition):
        await engine.load_more()


@pytest.mark.asyncio
async def test_load_more_requires_ready_state():
    engine = _engine(_many(3))
    with pytest.raises(InvalidListingTransition):
        await engine.load_more()


@pytest.mark.asyncio
async def test_changing_parameters_resets_to_page_one():
    questions = _many(15, tags=("python",)) + [make_question("sql-1", tags=("sql",))]
    engine = _engine(questions)
    await engine.run_query(QueryParams.create("newest"))
    await engine.load_more()
    assert len(engine.state.items) == 16

    state = await engine.run_query(QueryParams.create("newest", tag_filter="sql"))
    assert ids(state.items) == ["sql-1"]
    assert state.context.page == 1
    assert state.has_more is False


@pytest.mark.asyncio
async def test_drafts_merge_into_listing():
    persisted = [make_question("p1", hours_ago=3)]
    drafts = [make_question("d1", hours_ago=1), make_question("p1", hours_ago=0, title="draft copy")]
    engine = _engine(persisted, drafts)
    state = await engine.run_query(QueryParams.create("newest"))
    assert ids(state.items) == ["d1", "p1"]
    assert state.items[1].title == "Question p1"


@pytest.mark.asyncio
async def test_unavailable_store_falls_back_to_drafts_without_error():
    engine = ListingEngine(UnavailableStore(), DraftCache([make_question("d1"), make_question("d2", hours_ago=1)]))
    state = await engine.run_query(QueryParams.create("newest"))
    assert ids(state.items) == ["d1", "d2"]
    assert state.status is ListingStatus.READY
    assert state.error is None
    assert state.store_available is False


@pytest.mark.asyncio
async def test_unavailable_store_and_no_drafts_reports_results_unavailable():
    engine = ListingEngine(UnavailableStore(), DraftCache())
    state = await engine.run_query(QueryParams.create("popular"))
    assert state.status is ListingStatus.ERROR
    assert state.error is ErrorKind.STORE_UNAVAILABLE
    assert state.items == ()


@pytest.mark.asyncio
async def test_no_matches_is_not_an_error():
    engine = _engine(_many(3))
    state = await engine.run_query(QueryParams.create("newest", search_text="nothing like this"))
    assert state.status is ListingStatus.READY
    assert state.items == ()
    assert state.error is None


@pytest.mark.asyncio
async def test_store_raising_unavailable_is_recovered():
    class RaisingStore(InMemoryRecordStore):
        def list_questions(self, filters, window):
            raise StoreUnavailable("timeout")

    engine = ListingEngine(RaisingStore(), DraftCache([make_question("d1")]))
    state = await engine.run_query(QueryParams.create("newest"))
    assert ids(state.items) == ["d1"]
    assert state.store_available is False


@pytest.mark.asyncio
async def test_repeated_queries_are_identical():
    engine = _engine(_many(12, vote_score=1), [make_question("d", hours_ago=2)])
    params = QueryParams.create("trending")
    first = await engine.run_query(params)
    second = await engine.run_query(params)
    assert first.items == second.items
    assert first.has_more == second.has_more


@pytest.mark.asyncio
async def test_stale_response_is_dropped():
    store = GatedStore(questions=[make_question("py", tags=("python",)), make_question("sql", tags=("sql",))])
    gate = store.gate("python")
    engine = ListingEngine(store, DraftCache())

    slow = asyncio.create_task(engine.run_query(QueryParams.create("newest", tag_filter="python")))
    await asyncio.sleep(0)
    assert engine.state.is_loading

    fresh = await engine.run_query(QueryParams.create("newest", tag_filter="sql"))
    gate.set()
    late = await slow

    assert ids(fresh.items) == ["sql"]
    assert late is engine.state
    assert ids(engine.state.items) == ["sql"]
    assert engine.state.params.tag_filter == "sql"


@pytest.mark.asyncio
async def test_stale_load_more_is_dropped():
    store = GatedStore(questions=_many(12, tags=("python",)))
    engine = ListingEngine(store, DraftCache())
    await engine.run_query(QueryParams.create("newest"))

    gate = store.gate(None)
    more = asyncio.create_task(engine.load_more())
    await asyncio.sleep(0)
    assert engine.state.is_loading_more
    assert len(engine.state.items) == 10

    del store.gates[None]
    fresh = await engine.run_query(QueryParams.create("popular", tag_filter="python"))
    gate.set()
    await more

    assert engine.state is fresh
    assert engine.state.context.page == 1
    assert len(engine.state.items) == 10


@pytest.mark.asyncio
async def test_failure_keeps_previous_listing():
    class FlakyStore(InMemoryRecordStore):
        broken = False

        def list_questions(self, filters, window):
            if self.broken:
                raise RuntimeError("driver crashed")
            return super().list_questions(filters, window)

    store = FlakyStore(questions=_many(12))
    engine = ListingEngine(store, DraftCache())
    ready = await engine.run_query(QueryParams.create("newest"))

    store.broken = True
    with pytest.raises(RuntimeError):
        await engine.load_more()
    assert engine.state is ready
    with pytest.raises(RuntimeError):
        await engine.run_query(QueryParams.create("popular"))
    assert engine.state is ready


@pytest.mark.asyncio
async def test_refresh_picks_up_new_drafts():
    drafts = DraftCache()
    engine = ListingEngine(InMemoryRecordStore(questions=[make_question("p1", hours_ago=1)]), drafts)
    assert (await engine.refresh()).status is ListingStatus.IDLE

    await engine.run_query(QueryParams.create("newest"))
    drafts.add(make_question("d1"))
    state = await engine.refresh()
    assert ids(state.items) == ["d1", "p1"]


@pytest.mark.asyncio
async def test_store_is_read_batch_by_batch():
    store = GatedStore(questions=_many(5))
    engine = ListingEngine(store, DraftCache(), fetch_limit=2)
    state = await engine.run_query(QueryParams.create("newest", search_text="question"))
    assert [(w.offset, w.limit) for _, w in store.calls] == [(0, 2), (2, 2), (4, 2)]
    filters, _ = store.calls[-1]
    assert filters.sort_hint == "newest"
    assert filters.search_text == "question"
    assert state.total == 5


@pytest.mark.asyncio
async def test_every_record_is_reachable_beyond_one_batch():
    engine = _engine([make_question(f"q{i:04d}", hours_ago=i) for i in range(600)])
    state = await engine.run_query(QueryParams.create("newest"))
    assert state.total == 600
    while state.has_more:
        state = await engine.load_more()
    assert ids(state.items) == [f"q{i:04d}" for i in range(600)]
    assert state.context.page == 60


@pytest.mark.asyncio
async def test_trending_ranks_old_heavily_voted_question_outside_first_batch():
    recent = [make_question(f"q{i:04d}", hours_ago=i / 100) for i in range(600)]
    old_hot = make_question("old-hot", hours_ago=30 * 24, vote_score=10_000)
    engine = _engine(recent + [old_hot])
    state = await engine.run_query(QueryParams.create("trending"))
    assert state.items[0].id == "old-hot"
    assert state.total == 601


@pytest.mark.asyncio
async def test_failed_batch_makes_whole_read_unavailable():
    class SecondBatchFails(InMemoryRecordStore):
        def list_questions(self, filters, window):
            if window.offset > 0:
                return ListResult.unavailable()
            return super().list_questions(filters, window)

    engine = ListingEngine(SecondBatchFails(questions=_many(5)), DraftCache([make_question("d1")]), fetch_limit=2)
    state = await engine.run_query(QueryParams.create("newest"))
    assert ids(state.items) == ["d1"]
    assert state.store_available is False


class _OutageStore(InMemoryRecordStore):
    down = False

    def list_questions(self, filters, window):
        if self.down:
            return ListResult.unavailable()
        return super().list_questions(filters, window)


@pytest.mark.asyncio
async def test_outage_during_load_more_keeps_shown_pages():
    store = _OutageStore(questions=_many(25))
    engine = ListingEngine(store, DraftCache())
    await engine.run_query(QueryParams.create("newest"))
    await engine.load_more()

    store.down = True
    state = await engine.load_more()
    assert ids(state.items) == [f"q{i:02d}" for i in range(20)]
    assert state.status is ListingStatus.READY
    assert state.has_more is False
    assert state.store_available is False
    assert state.context.page == 2


@pytest.mark.asyncio
async def test_outage_during_load_more_does_not_append_a_drafts_only_page():
    store = _OutageStore(questions=[make_question(f"s{i}", hours_ago=i) for i in range(15)])
    drafts = DraftCache([make_question(f"d{i:02d}", hours_ago=100 + i) for i in range(12)])
    engine = ListingEngine(store, drafts)
    first = await engine.run_query(QueryParams.create("newest"))
    assert ids(first.items) == [f"s{i}" for i in range(10)]

    store.down = True
    state = await engine.load_more()
    assert ids(state.items) == ids(first.items)
    assert state.has_more is False

    refreshed = await engine.refresh()
    assert ids(refreshed.items) == [f"d{i:02d}" for i in range(10)]
    assert refreshed.has_more is True


@pytest.mark.asyncio
async def test_query_from_another_thread_waits_for_settle():
    store = GatedStore(questions=[make_question("py", tags=("python",)), make_question("sql", tags=("sql",))])
    gate = store.gate("sql")
    started = {}

    class Engine(ListingEngine):
        def _settle(self, context, result):
            if "thread" not in started:
                other = threading.Thread(
                    target=asyncio.run,
                    args=(self.run_query(QueryParams.create("newest", tag_filter="sql")),),
                )
                started["thread"] = other
                other.start()
                # gives the other thread time to install its query if nothing stops it
                other.join(timeout=0.2)
            return super()._settle(context, result)

    engine = Engine(store, DraftCache())
    await engine.run_query(QueryParams.create("newest", tag_filter="python"))
    gate.set()
    await asyncio.to_thread(started["thread"].join, 5)

    assert engine.state.params.tag_filter == "sql"
    assert ids(engine.state.items) == ["sql"]


def test_invalid_parameters_are_rejected_at_the_boundary():
    with pytest.raises(InvalidQueryParameter):
        QueryParams.create("hot")
    with pytest.raises(InvalidQueryParameter):
        QueryParams.create("newest", tag_filter="two words")
    assert QueryParams.create("newest", tag_filter="", search_text="").tag_filter is None
