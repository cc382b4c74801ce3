from enum import Enum


class ErrorType(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    BACKEND = "backend"
    NOT_CONFIGURED = "not_configured"
    INTERNAL_ERROR = "internal_error"


# Map error types to HTTP status codes
ERROR_STATUS_MAP = {
    ErrorType.VALIDATION: 400,
    ErrorType.NOT_FOUND: 404,
    ErrorType.FORBIDDEN: 403,
    ErrorType.BACKEND: 500,
    ErrorType.NOT_CONFIGURED: 503,
    ErrorType.INTERNAL_ERROR: 500,
}
