"""API error codes and exceptions.

Services raise ApiError subclasses; the app's exception handlers turn them
into the {"error": {...}} envelope with the status mapped from the code.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Machine-readable error codes, formatted E_CATEGORY_NAME."""

    E_UNAUTHENTICATED = "E_UNAUTHENTICATED"
    E_FORBIDDEN = "E_FORBIDDEN"

    E_NOT_FOUND = "E_NOT_FOUND"
    E_REPORT_NOT_FOUND = "E_REPORT_NOT_FOUND"
    E_DOCUMENT_NOT_FOUND = "E_DOCUMENT_NOT_FOUND"
    E_TAG_NOT_FOUND = "E_TAG_NOT_FOUND"

    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_NAME_INVALID = "E_NAME_INVALID"
    E_FILENAME_INVALID = "E_FILENAME_INVALID"
    E_EMPTY_FILE = "E_EMPTY_FILE"
    E_FILE_TOO_LARGE = "E_FILE_TOO_LARGE"
    E_TAG_INVALID = "E_TAG_INVALID"

    E_DUPLICATE_DOCUMENT = "E_DUPLICATE_DOCUMENT"
    E_EMAIL_TAKEN = "E_EMAIL_TAKEN"

    E_INTERNAL = "E_INTERNAL"
    E_STORAGE_ERROR = "E_STORAGE_ERROR"
    E_STORAGE_MISSING = "E_STORAGE_MISSING"


_CODES_BY_STATUS: dict[int, tuple[ApiErrorCode, ...]] = {
    400: (
        ApiErrorCode.E_INVALID_REQUEST,
        ApiErrorCode.E_NAME_INVALID,
        ApiErrorCode.E_FILENAME_INVALID,
        ApiErrorCode.E_EMPTY_FILE,
        ApiErrorCode.E_FILE_TOO_LARGE,
        ApiErrorCode.E_TAG_INVALID,
    ),
    401: (ApiErrorCode.E_UNAUTHENTICATED,),
    403: (ApiErrorCode.E_FORBIDDEN,),
    404: (
        ApiErrorCode.E_NOT_FOUND,
        ApiErrorCode.E_REPORT_NOT_FOUND,
        ApiErrorCode.E_DOCUMENT_NOT_FOUND,
        ApiErrorCode.E_TAG_NOT_FOUND,
    ),
    409: (ApiErrorCode.E_DUPLICATE_DOCUMENT, ApiErrorCode.E_EMAIL_TAKEN),
    500: (
        ApiErrorCode.E_INTERNAL,
        ApiErrorCode.E_STORAGE_ERROR,
        ApiErrorCode.E_STORAGE_MISSING,
    ),
}

ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    code: status for status, codes in _CODES_BY_STATUS.items() for code in codes
}


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message, safe to show clients
        status_code: HTTP status derived from code
    """

    def __init__(self, code: ApiErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)


class NotFoundError(ApiError):
    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_NOT_FOUND, message: str = "Not found"):
        super().__init__(code, message)


class ForbiddenError(ApiError):
    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_FORBIDDEN, message: str = "Forbidden"):
        super().__init__(code, message)


class InvalidRequestError(ApiError):
    def __init__(
        self, code: ApiErrorCode = ApiErrorCode.E_INVALID_REQUEST, message: str = "Invalid request"
    ):
        super().__init__(code, message)


class ConflictError(ApiError):
    """The request conflicts with rows that already exist."""


class DuplicateDocumentError(ConflictError):
    """The report already holds an active document with the same content hash."""

    def __init__(self, message: str = "Document already exists in this report"):
        super().__init__(ApiErrorCode.E_DUPLICATE_DOCUMENT, message)
