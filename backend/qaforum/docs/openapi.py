"""Builds a minimal OpenAPI spec from existing Pydantic schemas."""
from __future__ import annotations

from typing import Any, Dict

from flask import request

from ..api.answers.schemas import AnswerCreateIn, AnswerOut, VoteIn
from ..api.notifications.schemas import NotificationFeedOut
from ..api.questions.schemas import (
    ListingQueryIn,
    ListingStateOut,
    QuestionCreateIn,
    QuestionOut,
    QuestionUpdateIn,
)

SCHEMAS = (
    QuestionCreateIn,
    QuestionUpdateIn,
    QuestionOut,
    ListingQueryIn,
    ListingStateOut,
    AnswerCreateIn,
    AnswerOut,
    VoteIn,
    NotificationFeedOut,
)

REF = "#/components/schemas/{model}"
API_TITLE = "Q&A Forum API"


def _schemas() -> Dict[str, Any]:
    components: Dict[str, Any] = {}
    for model in SCHEMAS:
        schema = model.model_json_schema(ref_template=REF)
        components.update(schema.pop("$defs", {}))
        components[model.__name__] = schema
    return components


def _body(name: str) -> Dict[str, Any]:
    return {"required": True, "content": {"application/json": {"schema": {"$ref": REF.format(model=name)}}}}


def _op(tag: str, summary: str, *, body: str | None = None, auth: bool = False, status: str = "200") -> Dict[str, Any]:
    op: Dict[str, Any] = {"tags": [tag], "summary": summary, "responses": {status: {"description": "OK"}}}
    if body:
        op["requestBody"] = _body(body)
    if auth:
        op["security"] = [{"BearerAuth": []}]
    return op


def _path_param(name: str) -> list:
    return [{"name": name, "in": "path", "required": True, "schema": {"type": "string"}}]


def build_openapi() -> Dict[str, Any]:
    base_url = f"{request.scheme}://{request.host}"
    return {
        "openapi": "3.0.3",
        "info": {"title": API_TITLE, "version": "0.1.0"},
        "servers": [{"url": base_url}],
        "tags": [{"name": "Health"}, {"name": "Listing"}, {"name": "Questions"}, {"name": "Answers"}, {"name": "Notifications"}],
        "paths": {
            "/api/health/": {"get": _op("Health", "Liveness check")},
            "/api/health/store": {"get": _op("Health", "Record store status")},
            "/api/questions/listing": {
                "get": _op("Listing", "Current listing state of this session"),
                "post": _op("Listing", "Run a listing query (page 1)", body="ListingQueryIn"),
            },
            "/api/questions/listing/more": {"post": _op("Listing", "Append the next page")},
            "/api/questions/session": {"delete": _op("Listing", "End the client session and drop its drafts")},
            "/api/questions/": {"post": _op("Questions", "Ask a question", body="QuestionCreateIn", auth=True, status="201")},
            "/api/questions/mine": {"get": _op("Questions", "Questions of the current user", auth=True)},
            "/api/questions/{question_id}": {
                "parameters": _path_param("question_id"),
                "get": _op("Questions", "Get question by id"),
                "put": _op("Questions", "Edit question (author only)", body="QuestionUpdateIn", auth=True),
                "delete": _op("Questions", "Delete question (author only)", auth=True),
            },
            "/api/questions/{question_id}/answers": {
                "parameters": _path_param("question_id"),
                "get": _op("Answers", "List answers, accepted first"),
                "post": _op("Answers", "Submit an answer", body="AnswerCreateIn", auth=True, status="201"),
            },
            "/api/answers/{answer_id}/vote": {
                "parameters": _path_param("answer_id"),
                "post": _op("Answers", "Vote up or down", body="VoteIn", auth=True),
            },
            "/api/answers/{answer_id}/accept": {
                "parameters": _path_param("answer_id"),
                "post": _op("Answers", "Accept answer (question author only)", auth=True),
                "delete": _op("Answers", "Unaccept answer (question author only)", auth=True),
            },
            "/api/notifications/": {"get": _op("Notifications", "Notification feed", auth=True)},
            "/api/notifications/{notification_id}/read": {
                "parameters": _path_param("notification_id"),
                "post": _op("Notifications", "Mark one notification read", auth=True),
            },
            "/api/notifications/read-all": {"post": _op("Notifications", "Mark all notifications read", auth=True)},
        },
        "components": {
            "schemas": _schemas(),
            "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
        },
    }
