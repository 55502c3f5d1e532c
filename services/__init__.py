"""
Business logic services.

Each service handles one domain area.
"""

from services.product_service import ProductService, get_product_service
from services.product_import_service import (
    ProductImportService,
    ProductRepository,
    ImportRunResult,
    ImportFailure,
    get_product_import_service,
)

__all__ = [
    "ProductService",
    "get_product_service",
    "ProductImportService",
    "ProductRepository",
    "ImportRunResult",
    "ImportFailure",
    "get_product_import_service",
]
