"""Error kinds surfaced by the services and their JSON rendering."""
from flask import current_app, jsonify
from sqlalchemy.exc import DBAPIError, OperationalError
from werkzeug.exceptions import HTTPException


class LendingError(Exception):
    status_code = 400
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LendingError):
    status_code = 400
    kind = "validation_error"


class AuthenticationError(LendingError):
    status_code = 401
    kind = "authentication_error"


class ForbiddenError(LendingError):
    status_code = 403
    kind = "forbidden"


class NotFoundError(LendingError):
    status_code = 404
    kind = "not_found"


class ConflictError(LendingError):
    status_code = 409
    kind = "conflict"


def _json_error(message, code, kind):
    return jsonify({"success": False, "message": message, "error": kind}), code


def register_error_handlers(app):
    @app.errorhandler(LendingError)
    def _lending_error(e: LendingError):
        return _json_error(e.message, e.status_code, e.kind)

    @app.errorhandler(OperationalError)
    @app.errorhandler(DBAPIError)
    def _store_error(e):
        current_app.logger.exception(f"[store] Database failure: {e}")
        return _json_error("Storage temporarily unavailable", 503, "infrastructure_error")

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return _json_error(e.description, e.code, e.name.lower().replace(" ", "_"))

    @app.errorhandler(Exception)
    def _unexpected(e):
        current_app.logger.exception(f"[app] Unhandled error: {e}")
        return _json_error("Server error", 500, "server_error")


def register_jwt_handlers(jwt):
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return _json_error(f"Authentication required: {reason}", 401, AuthenticationError.kind)

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return _json_error(f"Invalid token: {reason}", 401, AuthenticationError.kind)

    @jwt.expired_token_loader
    def _expired_token(_header, _payload):
        return _json_error("Token has expired", 401, AuthenticationError.kind)
