from flask import jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from models import storage

logger = logging.getLogger(__name__)


def error_response(message: str, status: int, details: list | None = None):
    payload = {"error": message}
    if details is not None:
        payload["details"] = details
    return jsonify(payload), status


def flatten_messages(messages) -> list:
    """
    marshmallow nests errors as {field: [msg, ...]}; clients get a flat list of
    {"field": ..., "messages": [...]} entries instead.
    """
    if isinstance(messages, dict):
        return [
            {"field": field, "messages": msgs if isinstance(msgs, list) else [msgs]}
            for field, msgs in messages.items()
        ]
    if isinstance(messages, list):
        return [{"field": "_schema", "messages": messages}]
    return [{"field": "_schema", "messages": [str(messages)]}]


def register_error_handlers(app):
    # Expected failures raised with abort(code, description=...)
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 500
        if status >= 500:
            logger.error("HTTP %s: %s", status, err.description)
            return error_response("Internal server error", status)
        return error_response(err.description or err.name, status)

    # Marshmallow validation errors map to 400
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return error_response("Validation error", 400, details=flatten_messages(err.messages))

    # Integrity errors that slipped past the explicit checks (races on unique columns)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        storage.rollback()
        lower_msg = str(getattr(err, "orig", err)).lower()
        if "unique" in lower_msg or "duplicate" in lower_msg:
            logger.info("Unique constraint violated: %s", lower_msg)
            return error_response("Conflict", 409)
        logger.exception("Integrity error", exc_info=err)
        return error_response("Internal server error", 500)

    # 500 Internal Error (catch-all); details stay in the server log
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return error_response("Internal server error", 500)
