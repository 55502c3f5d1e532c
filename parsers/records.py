"""
Record types shared by the product import parsers.

All parsers return plain dataclasses; errors are returned as values,
never raised.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional


# ===================
# ENUMS
# ===================

class ImportFormat(str, Enum):
    """Source layout of an import file."""
    AUTO = "auto"
    STANDARD = "standard"
    SHOPIFY = "shopify"
    WOOCOMMERCE = "woocommerce"
    BIGCOMMERCE = "bigcommerce"


# ===================
# RAW TABLE
# ===================

@dataclass
class CSVParseResult:
    """Tokenized CSV: first row as headers, the rest as data rows."""
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.headers


def get_cell(row: list[str], index: Optional[int]) -> str:
    """Cell at index, or "" when the column is unmapped or the row is short."""
    if index is None or index < 0 or index >= len(row):
        return ""
    return row[index]


# ===================
# ERRORS
# ===================

@dataclass
class ImportErrorRecord:
    """
    Single problem found while importing.

    row is 1-based for data rows and 0 for schema-level problems
    (missing columns, bad mapping, unresolved references).
    """
    row: int
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"row": self.row, "field": self.field, "message": self.message}


# ===================
# PRODUCT RECORDS
# ===================

@dataclass
class StandardProductRecord:
    """Validated product from a generic spreadsheet row."""
    name: str
    description: Optional[str] = None
    price: int = 0  # smallest currency unit
    images: list[str] = field(default_factory=list)
    category: Optional[str] = None
    is_digital: bool = False
    track_inventory: bool = False
    inventory_count: Optional[int] = None
    status: str = "active"

    def apply_digital_rules(self) -> None:
        """Digital goods never track stock."""
        if self.is_digital:
            self.track_inventory = False
            self.inventory_count = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class VariantRecord:
    """One purchasable variant of a platform product."""
    name: str
    sku: Optional[str] = None
    price_adjustment: int = 0  # signed, relative to the product base price
    inventory_count: int = 0
    track_inventory: bool = True
    options: dict[str, str] = field(default_factory=dict)
    is_active: bool = True
    compare_at_price: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class VariantOptionDefinition:
    """Option axis (e.g. Size) and the values used by a product's variants."""
    name: str
    values: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"name": self.name, "values": list(self.values)}


@dataclass
class PlatformProductRecord(StandardProductRecord):
    """Product reconstructed from a platform export, with its variants."""
    has_variants: bool = False
    variant_options: list[str] = field(default_factory=list)
    variants: list[VariantRecord] = field(default_factory=list)

    @property
    def option_definitions(self) -> list[VariantOptionDefinition]:
        """Distinct values per option name, in first-seen order."""
        definitions = []
        for option_name in self.variant_options:
            values: list[str] = []
            for variant in self.variants:
                value = variant.options.get(option_name)
                if value and value not in values:
                    values.append(value)
            definitions.append(VariantOptionDefinition(name=option_name, values=values))
        return definitions

    def to_dict(self) -> dict:
        data = asdict(self)
        data["option_definitions"] = [d.to_dict() for d in self.option_definitions]
        return data


@dataclass
class PlatformImportBatch:
    """Products reconstructed from one platform export, tagged with the platform."""
    platform: ImportFormat
    products: list[PlatformProductRecord] = field(default_factory=list)

    @property
    def variant_count(self) -> int:
        return sum(len(p.variants) for p in self.products if p.has_variants)


# ===================
# PARSE RESULT
# ===================

@dataclass
class ImportParseResult:
    """
    Outcome of parsing one import file.

    format is the concrete layout that was used (never AUTO). mapping is
    only set on the standard path.
    """
    format: ImportFormat
    headers: list[str] = field(default_factory=list)
    mapping: Optional[dict[str, Optional[int]]] = None
    products: list[StandardProductRecord] = field(default_factory=list)
    errors: list[ImportErrorRecord] = field(default_factory=list)

    @property
    def product_count(self) -> int:
        return len(self.products)

    @property
    def variant_count(self) -> int:
        """Variants belonging to products that actually have variants."""
        return sum(
            len(p.variants)
            for p in self.products
            if isinstance(p, PlatformProductRecord) and p.has_variants
        )

    @property
    def success(self) -> bool:
        return len(self.products) > 0

    @property
    def is_platform(self) -> bool:
        return self.format not in (ImportFormat.STANDARD, ImportFormat.AUTO)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "format": self.format.value,
            "headers": self.headers,
            "mapping": self.mapping,
            "products": [p.to_dict() for p in self.products],
            "errors": [e.to_dict() for e in self.errors],
            "productCount": self.product_count,
            "variantCount": self.variant_count,
        }
