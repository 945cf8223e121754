"""
Application error types.

Every error raised by the services carries the HTTP status and the error code
used in the JSON envelope (see api/errors.py). Messages of AuthError are kept
generic on purpose; InternalError messages are logged but never sent to clients.
"""
from __future__ import annotations


class AppError(Exception):
    status = 500
    error = "INTERNAL_ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class AuthError(AppError):
    status = 401
    error = "AUTH_ERROR"


class ConflictError(AppError):
    status = 409
    error = "CONFLICT"


class NotFoundError(AppError):
    status = 404
    error = "NOT_FOUND"


class InternalError(AppError):
    status = 500
    error = "INTERNAL_ERROR"
