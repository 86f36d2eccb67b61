import logging
import os
import time
from datetime import datetime, timezone

from flask import Flask, g, jsonify, request
from flask_cors import CORS

from backend.services.errors import StoreError, TaskError
from backend.services.task_service import TaskService


def _configure_logging(app):
    level = getattr(logging, app.config["LOG_LEVEL"], logging.INFO)
    app.logger.setLevel(level)
    # Service and store modules log under "backend.*"
    logging.getLogger("backend").setLevel(level)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _build_store(app):
    from backend.models.task_store import MongoTaskStore
    from backend.utils.db import get_db, init_app as init_db

    init_db(app)
    return MongoTaskStore(get_db(app)[app.config["MONGO_TASKS_COLLECTION"]])


def create_app(config=None, store=None):
    """Build the Flask app.

    ``config`` overrides values from ``backend.config.Config``; ``store`` is any
    TaskStore implementation and defaults to the Mongo collection.
    """
    app = Flask(__name__)
    app.config.from_object("backend.config.Config")
    if config:
        app.config.update(config)
    app.json.sort_keys = app.config["JSON_SORT_KEYS"]

    _configure_logging(app)

    origins = app.config["CORS_ORIGINS"] or "*"
    CORS(app, resources={r"/api/*": {"origins": origins}}, supports_credentials=False)
    if origins == "*" and app.config["ENV"] == "production":
        app.logger.warning("CORS_ORIGIN is not set; allowing requests from any origin.")

    if store is None:
        store = _build_store(app)
    app.extensions["task_service"] = TaskService(store)

    from backend.routes.task_routes import tasks_bp

    app.register_blueprint(tasks_bp, url_prefix="/api/tasks")
    # Older frontends call the same API under /api/todos
    app.register_blueprint(tasks_bp, url_prefix="/api/todos", name="todos")

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.pop("request_started", None)
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        app.logger.info(
            "%s %s %s %.1fms", request.method, request.full_path.rstrip("?"),
            response.status_code, elapsed_ms,
        )
        return response

    @app.get("/api/health")
    def health():
        return jsonify(
            ok=True,
            status="ok",
            service=app.config["SERVICE_NAME"],
            env=app.config["ENV"],
            time=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        ), 200

    @app.errorhandler(TaskError)
    def task_error(exc):
        if isinstance(exc, StoreError):
            app.logger.exception("Task store failure: %s", exc.message)
            return jsonify(error="Internal Server Error"), 500
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(404)
    def not_found(_):
        return jsonify(error="Not Found"), 404

    @app.errorhandler(405)
    def method_not_allowed(_):
        return jsonify(error="Method Not Allowed"), 405

    @app.errorhandler(500)
    def server_error(_):
        return jsonify(error="Internal Server Error"), 500

    return app


if __name__ == "__main__":
    # Direct run support: python -m backend.app
    create_app().run(
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "5174")),
        debug=os.environ.get("FLASK_DEBUG", "1") == "1",
    )
