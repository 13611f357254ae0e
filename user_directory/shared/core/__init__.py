"""
Core primitives shared across the directory service (exception hierarchy).
"""

from .exceptions import (
    DirectoryException,
    DuplicateResourceError,
    NotFoundError,
    StorageError,
    UnsupportedOperationError,
    ValidationError,
)

__all__ = [
    "DirectoryException",
    "DuplicateResourceError",
    "NotFoundError",
    "StorageError",
    "UnsupportedOperationError",
    "ValidationError",
]
