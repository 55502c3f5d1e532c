"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
)
from models.product import (
    ProductStatus,
    ProductImage,
    VariantCreate,
    ProductCreate,
    ProductResponse,
    ProductListResponse,
    ProductCreateResult,
)
from models.product_import import (
    ImportErrorSchema,
    ImportPreviewResponse,
    ImportCommitRequest,
    ImportFailureSchema,
    ImportRunResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",

    # Product
    "ProductStatus",
    "ProductImage",
    "VariantCreate",
    "ProductCreate",
    "ProductResponse",
    "ProductListResponse",
    "ProductCreateResult",

    # Import
    "ImportErrorSchema",
    "ImportPreviewResponse",
    "ImportCommitRequest",
    "ImportFailureSchema",
    "ImportRunResponse",
]
