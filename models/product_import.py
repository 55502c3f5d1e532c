"""
Product import schemas (preview and commit).
"""

from pydantic import Field
from typing import Any, Optional

from models.base import BaseSchema
from models.product import ProductCreate
from parsers.records import ImportFormat, ImportParseResult


class ImportErrorSchema(BaseSchema):
    """One parse problem. row 0 = whole-file problem."""
    row: int
    field: str
    message: str


class ImportPreviewResponse(BaseSchema):
    """Parsed products and errors for review before committing."""

    format: ImportFormat
    headers: list[str] = Field(default_factory=list)
    mapping: Optional[dict[str, Optional[int]]] = None
    products: list[dict[str, Any]] = Field(default_factory=list)
    errors: list[ImportErrorSchema] = Field(default_factory=list)
    product_count: int = 0
    variant_count: int = 0

    @classmethod
    def from_result(cls, result: ImportParseResult) -> "ImportPreviewResponse":
        return cls(
            format=result.format,
            headers=result.headers,
            mapping=result.mapping,
            products=[p.to_dict() for p in result.products],
            errors=[ImportErrorSchema(**e.to_dict()) for e in result.errors],
            product_count=result.product_count,
            variant_count=result.variant_count,
        )


class ImportCommitRequest(BaseSchema):
    """Products (as returned by preview) to create, in order."""

    products: list[ProductCreate] = Field(..., min_length=1)


class ImportFailureSchema(BaseSchema):
    """A product that could not be created."""
    row: int
    product_name: Optional[str] = None
    message: str


class ImportRunResponse(BaseSchema):
    """Outcome of a committed import."""

    total: int
    success: int
    failed: int
    variants_created: int = 0
    processed: int
    stopped: bool = False
    errors: list[ImportFailureSchema] = Field(default_factory=list)
