import logging
from core.imports import jsonify, SQLAlchemyError
from core.errors import ErrorType, ERROR_STATUS_MAP
from core.extensions import db

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Custom exception that services can raise."""

    def __init__(self, error_type: ErrorType, message: str):
        self.error_type = error_type
        self.message = message
        super().__init__(message)


class ValidationError(AppException):
    def __init__(self, message: str):
        super().__init__(ErrorType.VALIDATION, message)


class NotFoundError(AppException):
    def __init__(self, message: str):
        super().__init__(ErrorType.NOT_FOUND, message)


class CheckoutError(AppException):
    """A backend step of checkout failed; the whole order was rolled back."""

    def __init__(self, message: str = "Order failed. Please try again."):
        super().__init__(ErrorType.BACKEND, message)


class ConfigurationError(AppException):
    def __init__(self, message: str):
        super().__init__(ErrorType.NOT_CONFIGURED, message)


def app_exception_handler(exc: AppException):
    """Global handler for AppException - converts to proper HTTP response."""
    status_code = ERROR_STATUS_MAP.get(exc.error_type, 500)
    return jsonify({"error": exc.message}), status_code


def database_exception_handler(exc: SQLAlchemyError):
    """Backend failures are logged and surfaced as a generic error."""
    db.session.rollback()
    logger.error(f"Database error: {exc}")
    return jsonify({"error": "Something went wrong. Please try again."}), 500


def register_error_handlers(app):
    app.register_error_handler(AppException, app_exception_handler)
    app.register_error_handler(SQLAlchemyError, database_exception_handler)
