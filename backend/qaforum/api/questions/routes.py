"""Questions blueprint: listing engine endpoints and question CRUD."""
from __future__ import annotations

from flask import Blueprint, current_app, request

from ...auth.jwt import current_user_id, require_bearer
from ...errors import InvalidListingTransition, ok
from ...integrations.forum import forum_ext
from ...listing.drafts import DraftCache
from ...listing.query import ListingState, QueryParams
from ...services.question_service import QuestionService
from .schemas import ListingQueryIn, ListingStateOut, QuestionCreateIn, QuestionOut, QuestionUpdateIn


bp = Blueprint("questions", __name__)


def _service(*, start_session: bool = True) -> QuestionService:
    """Read-only callers pass ``start_session=False`` so they never register a session."""
    client = forum_ext.client_session() if start_session else forum_ext.existing_client_session()
    drafts = client.drafts if client is not None else DraftCache()
    return QuestionService(forum_ext.store, drafts, current_app.config["LISTING_FETCH_LIMIT"])


def _state_out(state) -> dict:
    return ListingStateOut.from_state(state).model_dump(mode="json")


@bp.get("/listing")
def listing_state():
    client = forum_ext.existing_client_session()
    return ok(_state_out(client.engine.state if client is not None else ListingState()))


@bp.post("/listing")
async def run_listing():
    payload = ListingQueryIn.model_validate(request.get_json(silent=True) or {})
    params = QueryParams.create(payload.sort_by, tag_filter=payload.tag, search_text=payload.search)
    state = await forum_ext.client_session().engine.run_query(params)
    return ok(_state_out(state))


@bp.post("/listing/more")
async def load_more():
    client = forum_ext.existing_client_session()
    if client is None:
        raise InvalidListingTransition("no listing has been started in this session")
    state = await client.engine.load_more()
    return ok(_state_out(state))


@bp.post("/")
@require_bearer
async def ask_question():
    payload = QuestionCreateIn.model_validate_json(request.data)
    q = _service().ask_question(
        author_id=current_user_id(), title=payload.title, content=payload.content, tags=payload.tags
    )
    await forum_ext.client_session().engine.refresh()
    return ok(QuestionOut.from_domain(q).model_dump(mode="json"), 201)


@bp.get("/mine")
@require_bearer
def my_questions():
    mine = _service(start_session=False).my_questions(current_user_id())
    items = [QuestionOut.from_domain(q).model_dump(mode="json") for q in mine]
    return ok(items)


@bp.get("/<question_id>")
def get_question(question_id: str):
    q = _service(start_session=False).get_question(question_id)
    return ok(QuestionOut.from_domain(q).model_dump(mode="json"))


@bp.put("/<question_id>")
@require_bearer
async def update_question(question_id: str):
    payload = QuestionUpdateIn.model_validate_json(request.data)
    q = _service().edit_question(
        question_id,
        user_id=current_user_id(),
        title=payload.title,
        content=payload.content,
        tags=payload.tags,
    )
    await forum_ext.client_session().engine.refresh()
    return ok(QuestionOut.from_domain(q).model_dump(mode="json"))


@bp.delete("/<question_id>")
@require_bearer
async def delete_question(question_id: str):
    ok_ = _service().delete_question(question_id, user_id=current_user_id())
    await forum_ext.client_session().engine.refresh()
    return ok({"deleted": ok_})


@bp.delete("/session")
def end_session():
    return ok({"ended": forum_ext.end_client_session()})
