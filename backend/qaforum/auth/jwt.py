"""Minimal JWT helpers and a Flask decorator for Bearer auth."""
from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, Dict

import jwt
from flask import current_app, g, jsonify, request


def decode(token: str) -> Dict[str, Any]:
    secret = current_app.config.get("JWT_SECRET", "change-me")
    alg = current_app.config.get("JWT_ALG", "HS256")
    return jwt.decode(token, secret, algorithms=[alg])


def current_user_id() -> str:
    return g.user_id


def require_bearer(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Reject the request unless it carries a valid token whose ``sub`` names the user."""

    def _authenticate():
        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return jsonify({"error": "unauthorized", "message": "Missing Bearer token"}), 401
        token = auth.split(" ", 1)[1]
        try:
            claims = decode(token)
        except jwt.PyJWTError as e:
            return jsonify({"error": "unauthorized", "message": str(e)}), 401
        if not claims.get("sub"):
            return jsonify({"error": "unauthorized", "message": "Token has no subject"}), 401
        g.jwt = claims
        g.user_id = str(claims["sub"])
        return None

    if inspect.iscoroutinefunction(fn):

        @functools.wraps(fn)
        async def async_wrapper(*args: Any, **kwargs: Any):
            denied = _authenticate()
            if denied is not None:
                return denied
            return await fn(*args, **kwargs)

        return async_wrapper

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any):
        denied = _authenticate()
        if denied is not None:
            return denied
        return fn(*args, **kwargs)

    return wrapper
