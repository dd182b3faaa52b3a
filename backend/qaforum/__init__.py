"""Application factory and blueprint registration."""
from __future__ import annotations

from typing import Optional

from flask import Flask
from flask_cors import CORS

from .config import BaseConfig
from .db.repositories.base import RecordStoreAdapter
from .db.session import db
from .api.health.routes import bp as health_bp
from .api.questions.routes import bp as questions_bp
from .api.answers.routes import bp as answers_bp
from .api.notifications.routes import bp as notifications_bp
from .docs.routes import bp as docs_bp
from .errors import register_error_handlers
from .integrations.forum import forum_ext
from .integrations.supabase_client import supabase_ext


def create_app(
    config_class: type[BaseConfig] | None = None,
    store: Optional[RecordStoreAdapter] = None,
) -> Flask:
    """Create and configure the Flask application.

    ``store`` overrides the record store the configuration would select.
    """
    app = Flask(__name__)
    app.config.from_object((config_class or BaseConfig)())
    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",") if o.strip()]
    CORS(app, resources={r"/api/*": {"origins": origins}}, supports_credentials=True)

    # Init extensions
    db.init_app(app)
    supabase_ext.init_app(app)
    forum_ext.init_app(app, store=store)

    # Register blueprints
    app.register_blueprint(health_bp, url_prefix="/api/health")
    app.register_blueprint(questions_bp, url_prefix="/api/questions")
    app.register_blueprint(answers_bp, url_prefix="/api")
    app.register_blueprint(notifications_bp, url_prefix="/api/notifications")
    app.register_blueprint(docs_bp)

    # Global error handlers
    register_error_handlers(app)
    return app
