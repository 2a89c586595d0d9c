"""
Error taxonomy for the Visa Processing System

Every error raised by the workflow engine or the endpoints derives from
VisaSystemError and carries the HTTP status it maps to. The handlers in
app.main translate them into the standard response envelope.
"""

from typing import Any, List, Optional


class VisaSystemError(Exception):
    """Base class for all operational errors"""
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors


class ValidationError(VisaSystemError):
    """Malformed or out-of-range input"""
    status_code = 400


class AuthenticationError(VisaSystemError):
    """Missing, expired or invalid credential"""
    status_code = 401


class AuthorizationError(VisaSystemError):
    """Authenticated, but role or ownership does not permit the action"""
    status_code = 403


class NotFoundError(VisaSystemError):
    """Entity id does not resolve"""
    status_code = 404


class ConflictError(VisaSystemError):
    """Transition precondition violated or duplicate dependent entity"""
    status_code = 400


class IntegrityError(VisaSystemError):
    """Unique-constraint violation"""
    status_code = 400
