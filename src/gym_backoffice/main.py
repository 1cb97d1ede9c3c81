from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .attendance.controller import register as register_attendance
from .clients.controller import register as register_clients
from .common.logging_setup import configure_logging
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import DEFAULT_CUTOFF_TIME
from .core.exceptions import NotFoundError, StorageUnavailable, UniquenessViolation, ValidationError
from .database.bootstrap import apply_schema, list_tables
from .memberships.controller import register as register_memberships

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    def _error(message: str, status: int):
        return jsonify({"error": message}), status

    @app.errorhandler(ValidationError)
    def _validation(exc: ValidationError):
        return _error(str(exc), 400)

    @app.errorhandler(NotFoundError)
    def _not_found(exc: NotFoundError):
        return _error(str(exc), 404)

    @app.errorhandler(UniquenessViolation)
    def _conflict(exc: UniquenessViolation):
        logger.warning("Uniqueness violation (key=%s): %s", exc.key, exc)
        return _error(str(exc), 409)

    @app.errorhandler(StorageUnavailable)
    def _storage(exc: StorageUnavailable):
        logger.error("Storage unavailable: %s", exc)
        return _error("Database unavailable", 503)

    @app.errorhandler(HTTPException)
    def _http(exc: HTTPException):
        return _error(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        logger.exception("Unhandled error")
        return _error("Internal server error", 500)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            cutoff_time=getattr(settings, "ATTENDANCE_CUTOFF_TIME", DEFAULT_CUTOFF_TIME),
        )

    app.extensions["gym_backoffice"] = container

    register_error_handlers(app)
    register_clients(app, container)
    register_memberships(app, container)
    register_attendance(app, container)

    return app
