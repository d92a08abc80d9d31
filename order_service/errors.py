"""
Order Service errors

Every failure raised by the service layer carries one of the codes below so
the transport layer can translate it without inspecting messages.
"""
from typing import Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError


CODE_INVALID_INPUT = "INVALID_INPUT"
CODE_NOT_FOUND = "NOT_FOUND"
CODE_CONFLICT = "CONFLICT"
CODE_INTERNAL = "INTERNAL_ERROR"
CODE_UNAVAILABLE = "UNAVAILABLE"


class OrderServiceError(Exception):
    """Base exception for Order Service errors"""

    code = CODE_INTERNAL

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class InvalidInputError(OrderServiceError):
    """Caller-supplied data failed a precondition"""
    code = CODE_INVALID_INPUT


class NotFoundError(OrderServiceError):
    """Referenced order does not exist"""
    code = CODE_NOT_FOUND


class ConflictError(OrderServiceError):
    """Storage rejected the write (constraint violation)"""
    code = CODE_CONFLICT


class InternalError(OrderServiceError):
    """Unexpected storage failure"""
    code = CODE_INTERNAL


class UnavailableError(OrderServiceError):
    """Storage unreachable or statement timed out"""
    code = CODE_UNAVAILABLE


def wrap_storage_error(exc: SQLAlchemyError, message: str) -> OrderServiceError:
    """
    Classify a SQLAlchemy exception and wrap it with operation context

    Args:
        exc: Original storage exception
        message: Description of the failed operation

    Returns:
        ConflictError, UnavailableError or InternalError carrying exc as cause
    """
    if isinstance(exc, IntegrityError):
        return ConflictError(message, cause=exc)
    if isinstance(exc, OperationalError):
        return UnavailableError(message, cause=exc)
    return InternalError(message, cause=exc)
