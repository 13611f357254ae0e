# 📄 File: user_directory/shared/core/exceptions.py
# 🧭 Purpose (Layman Explanation):
# This file defines all the special error types the directory service uses to say
# what went wrong (bad input, unknown user, storage down) instead of generic errors.
# 🧪 Purpose (Technical Summary):
# Custom exception hierarchy providing specific error types with HTTP status codes,
# error details, and proper serialization for API responses and error handling.
# 🔗 Dependencies:
# FastAPI HTTPException, typing, HTTP status constants
# 🔄 Connected Modules / Calls From:
# Domain services, storage adapters, application exception handlers

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DirectoryException(Exception):
    """
    Base exception class for the User Directory service.
    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__.upper()
        super().__init__(self.message)

    def to_dict(self, request_id: Optional[str] = None) -> Dict[str, Any]:
        """Convert exception to the API error body."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "request_id": request_id
            }
        }


# =============================================================================
# VALIDATION & DATA EXCEPTIONS
# =============================================================================

class ValidationError(DirectoryException):
    """
    Exception raised for data validation failures.
    Used for missing required fields and malformed identifiers.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if constraint:
            details["constraint"] = constraint

        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code="VALIDATION_ERROR"
        )


class NotFoundError(DirectoryException):
    """
    Exception raised when requested resource is not found.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
            error_code="NOT_FOUND"
        )


class DuplicateResourceError(DirectoryException):
    """
    Exception raised when attempting to create duplicate resources.
    Used when an insert hits an existing primary key.
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        resource_type: Optional[str] = None,
        field: Optional[str] = None,
        value: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if resource_type:
            details["resource_type"] = resource_type
        if field:
            details["field"] = field
        if value:
            details["value"] = value

        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
            error_code="DUPLICATE_RESOURCE"
        )


class UnsupportedOperationError(DirectoryException):
    """
    Exception raised when the configured store lacks a capability
    (phone lookup, flush, bulk scan).
    """

    def __init__(
        self,
        message: str = "Operation not supported by this storage backend",
        operation: Optional[str] = None,
        backend: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation
        if backend:
            details["backend"] = backend

        super().__init__(
            message=message,
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            details=details,
            error_code="OPERATION_NOT_SUPPORTED"
        )


# =============================================================================
# STORAGE EXCEPTIONS
# =============================================================================

class StorageError(DirectoryException):
    """
    Exception raised for record store failures.
    Used for unreachable backends, failed writes and undecodable records.
    """

    def __init__(
        self,
        message: str = "Storage error",
        operation: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation
        if key:
            details["key"] = key

        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details,
            error_code="STORAGE_ERROR"
        )


# =============================================================================
# EXCEPTION UTILITIES
# =============================================================================

def exception_to_dict(
    exception: Exception,
    request_id: Optional[str] = None,
    include_type: bool = False
) -> Dict[str, Any]:
    """
    Convert any exception to the API error body.

    Unexpected exceptions never expose their message; ``include_type`` adds
    the exception class name to the details.

    Args:
        exception: Exception to convert
        request_id: Request id of the failing request, if known
        include_type: Whether to report the class of an unexpected exception

    Returns:
        Dict: ``{"error": {code, message, details, timestamp, request_id}}``
    """
    if isinstance(exception, DirectoryException):
        return exception.to_dict(request_id)

    return DirectoryException(
        message="An internal server error occurred",
        details={"error_type": type(exception).__name__} if include_type else {},
        error_code="INTERNAL_SERVER_ERROR"
    ).to_dict(request_id)


def is_client_error(exception: Exception) -> bool:
    """
    Check if exception represents a client error (4xx).

    Args:
        exception: Exception to check

    Returns:
        bool: True if client error, False otherwise
    """
    if isinstance(exception, DirectoryException):
        return 400 <= exception.status_code < 500

    if isinstance(exception, HTTPException):
        return 400 <= exception.status_code < 500

    return False
