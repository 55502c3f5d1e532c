"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ForbiddenError,
    DatabaseError,

    # Product-specific
    ProductNotFoundError,
    ProductLimitReachedError,
    StoreNotConfiguredError,

    # Import
    ImportFileError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ForbiddenError",
    "DatabaseError",

    # Product
    "ProductNotFoundError",
    "ProductLimitReachedError",
    "StoreNotConfiguredError",

    # Import
    "ImportFileError",
]
