from flask import jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError
import logging

from utils.exceptions import AppError, InternalError

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "An unexpected error occurred"


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # Domain errors carry their own status and code
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        if isinstance(err, InternalError) or err.status >= 500:
            logger.error("Internal error: %s", err, exc_info=err)
            return error_response("INTERNAL_ERROR", GENERIC_MESSAGE, 500)
        return error_response(err.error, err.message, err.status)

    # Marshmallow validation errors map to 400; field messages are not secret
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return error_response("VALIDATION_ERROR", "Invalid input", 400, details=err.messages)

    # Database failures never leak SQL to the client
    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(err: SQLAlchemyError):
        logger.exception("Database error", exc_info=err)
        return error_response("INTERNAL_ERROR", GENERIC_MESSAGE, 500)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        code = err.code or 400
        error = {
            400: "BAD_REQUEST",
            404: "NOT_FOUND",
            405: "METHOD_NOT_ALLOWED",
            415: "UNSUPPORTED_MEDIA_TYPE",
        }.get(code, "HTTP_ERROR")
        return error_response(error, err.description, code)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return error_response("INTERNAL_ERROR", GENERIC_MESSAGE, 500)
