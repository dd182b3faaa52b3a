"""Docs blueprint: the generated OpenAPI document and a Swagger UI page for it."""
from __future__ import annotations

from flask import Blueprint, Response, jsonify, render_template_string, url_for

from .openapi import API_TITLE, build_openapi

bp = Blueprint("docs", __name__)

SWAGGER_UI = """<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <title>{{ title }}</title>
  <link rel="stylesheet" href="{{ cdn }}/swagger-ui.css" />
  <style>body{margin:0;} #swagger-ui{height:100vh;}</style>
</head>
<body>
  <div id="swagger-ui"></div>
  <script src="{{ cdn }}/swagger-ui-bundle.js"></script>
  <script>
    window.ui = SwaggerUIBundle({ url: "{{ spec_url }}", dom_id: "#swagger-ui", persistAuthorization: true });
  </script>
</body>
</html>
"""

SWAGGER_CDN = "https://unpkg.com/swagger-ui-dist@5"


@bp.get("/openapi.json")
def openapi_json() -> Response:
    return jsonify(build_openapi())


@bp.get("/docs")
def swagger_ui() -> Response:
    html = render_template_string(
        SWAGGER_UI, title=API_TITLE, cdn=SWAGGER_CDN, spec_url=url_for("docs.openapi_json")
    )
    return Response(html, mimetype="text/html")
