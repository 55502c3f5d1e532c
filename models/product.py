"""
Product schemas for validation and serialization.

Prices are integers in the smallest currency unit (cents, or whole
units for zero-decimal currencies).
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Optional
from enum import Enum

from models.base import BaseSchema, TimestampMixin, page_count


class ProductStatus(str, Enum):
    """Storefront visibility."""
    ACTIVE = "active"
    DRAFT = "draft"
    ARCHIVED = "archived"


class ProductImage(BaseModel):
    """Image as stored on the product row."""
    url: str
    alt: Optional[str] = None
    position: int = 0


class VariantCreate(BaseSchema):
    """Variant submitted together with a new product."""

    name: str = Field(..., min_length=1, max_length=255)
    sku: Optional[str] = Field(None, max_length=100)
    price_adjustment: int = Field(
        0,
        description="Signed delta from the product price (smallest unit)"
    )
    inventory_count: int = Field(0, ge=0)
    track_inventory: bool = True
    options: dict[str, str] = Field(default_factory=dict)
    is_active: bool = True
    compare_at_price: Optional[int] = Field(None, ge=0)


class ProductCreate(BaseSchema):
    """
    Create a new product.

    Required: name
    Digital products never track inventory; a product with variants keeps
    its stock on the variants.
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Product name",
        examples=["Classic Tee", "Ceramic Mug"]
    )
    description: Optional[str] = Field(None, description="Plain text or HTML")
    price: int = Field(0, ge=0, description="Price in the smallest currency unit")
    images: list[str] = Field(default_factory=list, description="Image URLs in display order")
    category: Optional[str] = Field(None, max_length=255)
    status: ProductStatus = ProductStatus.ACTIVE
    is_digital: bool = False
    track_inventory: bool = False
    inventory_count: Optional[int] = Field(None, ge=0)
    has_variants: bool = False
    variant_options: list[str] = Field(default_factory=list)
    variants: list[VariantCreate] = Field(default_factory=list)

    @field_validator("images")
    @classmethod
    def drop_blank_images(cls, v: list[str]) -> list[str]:
        return [url.strip() for url in v if url and url.strip()]

    @model_validator(mode="before")
    @classmethod
    def apply_inventory_rules(cls, data: Any) -> Any:
        """Digital goods are never stock-tracked; variant stock lives on variants."""
        if isinstance(data, dict) and (data.get("is_digital") or data.get("has_variants")):
            data = {**data, "track_inventory": False, "inventory_count": None}
        return data

    @classmethod
    def from_record(cls, record: Any) -> "ProductCreate":
        """Build from a parser record (standard or platform)."""
        data = record.to_dict()
        data.pop("option_definitions", None)
        return cls(**data)


class ProductResponse(BaseSchema, TimestampMixin):
    """
    Product response with all fields.

    Used for GET responses.
    """

    id: str = Field(..., description="Product UUID")
    store_id: Optional[str] = None
    name: str
    slug: str
    description: Optional[str] = None
    price: int = 0
    images: list[ProductImage] = Field(default_factory=list)
    category: Optional[str] = None
    status: ProductStatus = ProductStatus.ACTIVE
    is_digital: bool = False
    track_inventory: bool = False
    inventory_count: Optional[int] = None
    has_variants: bool = False
    variant_options: list[str] = Field(default_factory=list)


class ProductListResponse(BaseSchema):
    """List of products with pagination."""

    data: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def from_page(
        cls,
        products: list[ProductResponse],
        total: int,
        page: int,
        page_size: int,
    ) -> "ProductListResponse":
        return cls(
            data=products,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=page_count(total, page_size),
        )


class ProductCreateResult(BaseSchema):
    """Created product plus how many variant rows were written."""

    product: ProductResponse
    variants_created: int = 0
