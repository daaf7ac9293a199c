"""
Typed API errors
Services raise these; main.py renders them into the error envelope
"""
from typing import Optional


class ApiError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        body = {"code": self.code, "message": self.message}
        if self.field is not None:
            body["field"] = self.field
        return body


class ValidationError(ApiError):
    status_code = 400
    code = "INVALID_FORMAT"

    def __init__(self, code: str, message: str, field: Optional[str] = None):
        super().__init__(message, field=field, code=code)


class UnauthenticatedError(ApiError):
    status_code = 401
    code = "UNAUTHENTICATED"


class InvalidCredentialsError(UnauthenticatedError):
    code = "INVALID_CREDENTIALS"

    def __init__(self):
        super().__init__("Invalid email or password")


class UnauthorizedError(ApiError):
    status_code = 403
    code = "UNAUTHORIZED"


class NotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(ApiError):
    status_code = 409
    code = "CONFLICT"


class PayloadTooLargeError(ApiError):
    status_code = 413
    code = "PAYLOAD_TOO_LARGE"
