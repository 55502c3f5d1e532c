"""
Custom exception classes for the application.

Parser row/field problems are never raised; they are returned as
ImportErrorRecord values. These classes cover request and repository
failures only.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ForbiddenError(AppError):
    """Action not allowed for this store (403)."""

    def __init__(
        self,
        message: str,
        code: str = "FORBIDDEN",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=403,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# PRODUCT ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product",
            identifier=product_id,
            code="PRODUCT_NOT_FOUND"
        )


class ProductLimitReachedError(ForbiddenError):
    """Store tier does not allow more products."""

    def __init__(self, limit: int, tier: str):
        super().__init__(
            code="PRODUCT_LIMIT_REACHED",
            message=(
                f"Product limit reached ({limit} products on the {tier} plan). "
                "Upgrade to add more products."
            ),
            details={"limit": limit, "tier": tier}
        )


class StoreNotConfiguredError(AppError):
    """STORE_ID is missing, so writes cannot be scoped."""

    def __init__(self):
        super().__init__(
            code="STORE_NOT_CONFIGURED",
            message="Store is not configured. Set STORE_ID.",
            status_code=500
        )


# ===================
# IMPORT ERRORS
# ===================

class ImportFileError(ValidationError):
    """Uploaded import file was rejected before parsing."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="IMPORT_FILE_INVALID",
            message=message,
            details=details
        )
