# tangent/errors.py
# Errors raised by the gates and repositories. They are turned into the
# failure envelope by the handlers registered in register_error_handlers().
from flask import current_app
from werkzeug.exceptions import HTTPException

from tangent.responses import send_error


class ApiError(Exception):
    """Base error for the API. `message` may be a string or a field mapping."""

    def __init__(self, message, data=None):
        super().__init__(message)
        self.message = message
        self.data = data


class Unauthorized(ApiError):
    def __init__(self, reason='Unauthorised'):
        super().__init__('Unauthorised', {'error': reason})


class NotFound(ApiError):
    pass


class ValidationError(ApiError):
    """Carries a mapping of field name -> list of messages."""

    def __init__(self, errors):
        super().__init__(errors)
        self.errors = errors


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return send_error(e.message, e.data)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return send_error(e.name)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        current_app.logger.error(f"Unhandled error: {e}", exc_info=True)
        return send_error('Server error', code=500)
