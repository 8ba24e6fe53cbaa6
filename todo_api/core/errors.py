"""Service-level error taxonomy.

Every class carries an HTTP status and a stable machine-readable code; the
exception handlers in ``todo_api.core.error_handlers`` render them as
``{"error": {"code", "message", "details"}}``.
"""
from __future__ import annotations

from typing import Optional


class ServiceError(Exception):
    status_code: int = 500
    error_code: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, detail: Optional[dict] = None) -> None:
        self.message = message or self.default_message
        self.detail = detail or None
        super().__init__(self.message)


class InvalidCredentials(ServiceError):
    status_code = 401
    error_code = "invalid_credentials"
    default_message = "Invalid credentials"


class InvalidRefreshToken(ServiceError):
    status_code = 401
    error_code = "invalid_refresh_token"
    default_message = "Invalid refresh token"


class Unauthorized(ServiceError):
    status_code = 401
    error_code = "unauthorized"
    default_message = "Unauthorized"


class UserNotFound(ServiceError):
    status_code = 404
    error_code = "user_not_found"
    default_message = "User not found"


class InvalidOrExpiredToken(ServiceError):
    status_code = 400
    error_code = "invalid_or_expired_token"
    default_message = "Invalid or expired password reset token"


class EmailAlreadyExists(ServiceError):
    status_code = 409
    error_code = "email_already_exists"
    default_message = "Email already exists"


class TodoNotFound(ServiceError):
    status_code = 404
    error_code = "todo_not_found"
    default_message = "Todo not found"


class InvalidTodoData(ServiceError):
    status_code = 400
    error_code = "invalid_todo_data"
    default_message = "Invalid todo data"


class RateLimited(ServiceError):
    status_code = 429
    error_code = "rate_limited"
    default_message = "Too many requests"


class InternalError(ServiceError):
    pass


__all__ = [
    "ServiceError",
    "InvalidCredentials",
    "InvalidRefreshToken",
    "Unauthorized",
    "UserNotFound",
    "InvalidOrExpiredToken",
    "EmailAlreadyExists",
    "TodoNotFound",
    "InvalidTodoData",
    "RateLimited",
    "InternalError",
]
