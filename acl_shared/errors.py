"""
Shared error handling for the ACL decision engine.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class AclException(Exception):
    """Base exception for the ACL engine."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class NotFoundError(AclException):
    """A role or resource is not registered."""

    def __init__(self, message: str = "Entity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class DuplicateError(AclException):
    """A role or resource ID is already registered."""

    def __init__(self, message: str = "Entity already exists", details: Optional[Dict[str, Any]] = None):
        super().__init__("DUPLICATE", message, details)


class InvalidInputError(AclException):
    """A value does not satisfy the role, resource, privilege or assertion capability."""

    def __init__(self, message: str = "Invalid input", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_INPUT", message, details)
