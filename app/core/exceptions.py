"""
Error taxonomy shared by every module.

All errors are HTTPException subclasses so services can raise them directly,
the same way they raise HTTPException, and the handlers in app.main render
them as {"message": ..., "error": ...}.
"""

from fastapi import HTTPException, status
from typing import Optional


class AppError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Unexpected error"

    def __init__(self, message: Optional[str] = None, error: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message, headers=headers)
        self.error = error


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Conflict(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class DuplicateEmail(Conflict):
    default_message = "Email is already registered"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed"

    def __init__(self, message: Optional[str] = None, error: Optional[str] = None):
        super().__init__(message, error, headers={"WWW-Authenticate": "Bearer"})


class MissingCredential(AuthError):
    default_message = "Access denied. Token required"


class InvalidCredential(AuthError):
    default_message = "Invalid or expired token"


class InvalidPassword(AuthError):
    default_message = "Incorrect password"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to perform this action"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class StoreError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Storage operation failed"
