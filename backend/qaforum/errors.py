"""Domain exceptions, global HTTP error handling and JSON response helpers."""
from __future__ import annotations

from typing import Any

from flask import Flask, jsonify
from pydantic import ValidationError


class QAForumError(Exception):
    """Base class for errors raised by the forum core."""

    code = "error"
    status = 500


class StoreUnavailable(QAForumError):
    """The record store could not be reached or returned a fault."""

    code = "store_unavailable"
    status = 503


class InvalidQueryParameter(QAForumError, ValueError):
    """Unrecognized sort mode or malformed filter: a caller contract error."""

    code = "invalid_query_parameter"
    status = 400


class StaleResponse(QAForumError):
    """A fetch result arrived after its query context was replaced."""

    code = "stale_response"


class InvalidListingTransition(QAForumError):
    code = "invalid_listing_transition"
    status = 409


class NotFound(QAForumError):
    code = "not_found"
    status = 404


class PermissionDenied(QAForumError):
    code = "forbidden"
    status = 403


class ValidationFailed(QAForumError, ValueError):
    code = "bad_request"
    status = 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(QAForumError)
    def forum_error(err: QAForumError):  # type: ignore[override]
        return jsonify({"error": err.code, "message": str(err)}), err.status

    @app.errorhandler(ValidationError)
    def invalid_payload(err: ValidationError):  # type: ignore[override]
        return jsonify({"error": "unprocessable_entity", "message": str(err)}), 422

    @app.errorhandler(400)
    def bad_request(err: Exception):  # type: ignore[override]
        return jsonify({"error": "bad_request", "message": str(err)}), 400

    @app.errorhandler(401)
    def unauthorized(err: Exception):  # type: ignore[override]
        return jsonify({"error": "unauthorized", "message": str(err)}), 401

    @app.errorhandler(404)
    def not_found(err: Exception):  # type: ignore[override]
        return jsonify({"error": "not_found", "message": str(err)}), 404

    @app.errorhandler(422)
    def unprocessable(err: Exception):  # type: ignore[override]
        return jsonify({"error": "unprocessable_entity", "message": str(err)}), 422

    @app.errorhandler(500)
    def internal(err: Exception):  # type: ignore[override]
        return jsonify({"error": "internal_server_error", "message": "unexpected error"}), 500


def ok(data: Any, status: int = 200):
    return jsonify({"data": data}), status
