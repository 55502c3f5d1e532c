"""
Platform export formats: header tables and detection.

Each supported storefront platform is described by a PlatformDialect:
the literal headers it uses for each logical column, how its rows are
classified and grouped, and a few value rules. The grouping and
reconstruction code in platform_parser.py is shared by all dialects.

Headers are compared after normalize_header() (lowercase, trimmed,
single spaces, no trailing "?") and must match exactly.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional
import structlog

from parsers.records import ImportFormat, get_cell
from utils.text_utils import normalize_header, is_truthy

logger = structlog.get_logger(__name__)


# ===================
# DATA CLASSES
# ===================

class RowRole(str, Enum):
    """What a physical row contributes to the product graph."""
    PRODUCT = "product"
    VARIANT = "variant"
    PRODUCT_AND_VARIANT = "product_and_variant"
    SKIP = "skip"


@dataclass(frozen=True)
class OptionSlot:
    """One option name/value column pair (e.g. Option1 Name / Option1 Value)."""
    name_column: str
    value_column: str


@dataclass(frozen=True)
class PlatformDialect:
    """
    Column table and row rules for one platform's product export.

    columns maps logical column names to accepted header spellings, in
    priority order. Logical names used by the parser:

        key, row_type, id, sku, parent, title, description,
        short_description, category, brand, status, published, price,
        sale_price, compare_at_price, inventory, track_inventory,
        in_stock, requires_shipping, virtual, downloadable,
        product_type, image

    plus one name/value pair per OptionSlot.
    """
    format: ImportFormat
    label: str
    columns: dict[str, tuple[str, ...]]
    required_columns: tuple[str, ...]
    required_headers: tuple[str, ...]
    distinctive_headers: tuple[str, ...]
    min_distinctive: int
    classify_row: Callable[[dict[str, str]], RowRole]
    requires_shipping: Callable[[dict[str, str]], Optional[bool]]
    status: Callable[[dict[str, str]], str]
    track_inventory: Callable[[dict[str, str]], Optional[bool]]
    # Logical columns tried in order for a product row's identity
    key_columns: tuple[str, ...] = ("key",)
    # Logical columns registered as references a variant row may point at
    reference_columns: tuple[str, ...] = ()
    # Column a variant row uses to name its product; None = previous product row
    parent_column: Optional[str] = None
    option_slots: tuple[OptionSlot, ...] = ()
    # Options parsed out of a variant row's title cell instead of slots
    parse_title_options: Optional[Callable[[str], list[tuple[str, str]]]] = None
    # Numbered image columns, formatted with n = 1..image_series_count
    image_series: tuple[str, ...] = ()
    image_series_count: int = 10
    split_images: bool = False
    description_columns: tuple[str, ...] = ("description",)
    category_columns: tuple[str, ...] = ("category",)
    category_separator: Optional[str] = None
    category_hierarchy_separator: Optional[str] = None

    def column_label(self, logical: str) -> str:
        """Human header name for error messages (first alias, title-cased)."""
        aliases = self.columns.get(logical, (logical,))
        return aliases[0].title()


@dataclass
class ColumnLocator:
    """Resolved header positions for one file under one dialect."""
    dialect: PlatformDialect
    indices: dict[str, int] = field(default_factory=dict)
    image_indices: list[int] = field(default_factory=list)

    def has(self, logical: str) -> bool:
        return logical in self.indices

    def missing_required(self) -> list[str]:
        return [name for name in self.dialect.required_columns if name not in self.indices]

    def read(self, row: list[str]) -> dict[str, str]:
        """Logical column -> cell text for one row (absent columns read as "")."""
        return {name: get_cell(row, index) for name, index in self.indices.items()}

    def read_images(self, row: list[str]) -> list[str]:
        """Raw image cells of one row, split when the dialect packs several per cell."""
        images = []
        for index in self.image_indices:
            cell = get_cell(row, index)
            if not cell:
                continue
            if self.dialect.split_images:
                images.extend(part.strip() for part in cell.split(",") if part.strip())
            else:
                images.append(cell)
        return images


# ===================
# VALUE RULES
# ===================

def _shopify_row_role(cells: dict[str, str]) -> RowRole:
    return RowRole.PRODUCT_AND_VARIANT


def _shopify_requires_shipping(cells: dict[str, str]) -> Optional[bool]:
    value = cells.get("requires_shipping", "")
    if not value:
        return None
    return is_truthy(value)


def _shopify_status(cells: dict[str, str]) -> str:
    status = cells.get("status", "").strip().lower()
    if status:
        return "active" if status == "active" else "draft"
    published = cells.get("published", "")
    if published:
        return "active" if is_truthy(published) else "draft"
    return "active"


def _shopify_track_inventory(cells: dict[str, str]) -> Optional[bool]:
    # Variant Inventory Tracker holds "shopify" (or an app name) when tracked
    tracker = cells.get("track_inventory", "")
    return True if tracker else None


WOOCOMMERCE_PARENT_TYPES = {"simple", "variable", "grouped", "external"}


def _woocommerce_row_role(cells: dict[str, str]) -> RowRole:
    # Type may carry flags too, e.g. "simple, virtual"
    types = {part.strip().lower() for part in cells.get("row_type", "").split(",")}
    if "variation" in types:
        return RowRole.VARIANT
    if types & WOOCOMMERCE_PARENT_TYPES:
        return RowRole.PRODUCT
    return RowRole.SKIP


def _woocommerce_requires_shipping(cells: dict[str, str]) -> Optional[bool]:
    virtual = cells.get("virtual", "")
    downloadable = cells.get("downloadable", "")
    if not virtual and not downloadable:
        return None
    return not (is_truthy(virtual) or is_truthy(downloadable))


def _woocommerce_status(cells: dict[str, str]) -> str:
    published = cells.get("published", "").strip()
    if not published:
        return "active"
    return "active" if published == "1" or is_truthy(published) else "draft"


def _woocommerce_track_inventory(cells: dict[str, str]) -> Optional[bool]:
    value = cells.get("track_inventory", "")
    if not value:
        return None
    return is_truthy(value)


def _bigcommerce_row_role(cells: dict[str, str]) -> RowRole:
    item_type = cells.get("row_type", "").strip().lower()
    if item_type == "product":
        return RowRole.PRODUCT
    if item_type == "sku":
        return RowRole.VARIANT
    # Rule rows (price rules) and anything unknown carry no product data
    return RowRole.SKIP


def _bigcommerce_requires_shipping(cells: dict[str, str]) -> Optional[bool]:
    product_type = cells.get("product_type", "").strip().upper()
    if product_type == "D":
        return False
    if product_type == "P":
        return True
    return None


def _bigcommerce_status(cells: dict[str, str]) -> str:
    visible = cells.get("published", "")
    if not visible:
        return "active"
    return "active" if is_truthy(visible) else "draft"


def _bigcommerce_track_inventory(cells: dict[str, str]) -> Optional[bool]:
    value = cells.get("track_inventory", "").strip().lower()
    if not value:
        return None
    return value in ("by product", "by option") or is_truthy(value)


BRACKET_OPTION = re.compile(r"\[([^\]]*)\]")


def parse_bigcommerce_options(value: str) -> list[tuple[str, str]]:
    """
    Parse option values from a BigCommerce SKU row's name cell.

    Accepted shapes:
        "[S]Size=Small,[CS]Color=Red"  -> Size: Small, Color: Red
        "[Size=Small][Color=Red]"      -> Size: Small, Color: Red
        "[Small][Red]"                 -> Option 1: Small, Option 2: Red
        "Size: Small, Color: Red"      -> Size: Small, Color: Red
    Anything else becomes a single "Option" value.
    """
    value = value.strip()
    if not value:
        return []

    # Export style: "[RB]Size=Small,[S]Color=Red" (bracket holds the option type)
    if value.startswith("[") and "=" in value and "]" in value and not value.endswith("]"):
        pairs = []
        for part in re.split(r",(?=\s*\[)", value):
            part = BRACKET_OPTION.sub("", part, count=1).strip()
            if "=" in part:
                name, option_value = part.split("=", 1)
                pairs.append((name.strip(), option_value.strip()))
        if pairs:
            return pairs

    bracketed = BRACKET_OPTION.findall(value)
    if bracketed and BRACKET_OPTION.sub("", value).strip() == "":
        pairs = []
        for position, token in enumerate(bracketed, start=1):
            if "=" in token:
                name, option_value = token.split("=", 1)
                pairs.append((name.strip(), option_value.strip()))
            else:
                pairs.append((f"Option {position}", token.strip()))
        return pairs

    if ":" in value:
        pairs = []
        for part in value.split(","):
            if ":" not in part:
                continue
            name, option_value = part.split(":", 1)
            if name.strip():
                pairs.append((name.strip(), option_value.strip()))
        if pairs:
            return pairs

    return [("Option", value)]


# ===================
# DIALECT TABLES
# ===================

SHOPIFY = PlatformDialect(
    format=ImportFormat.SHOPIFY,
    label="Shopify",
    columns={
        "key": ("handle",),
        "title": ("title",),
        "description": ("body (html)", "body html", "description"),
        "category": ("type", "product type", "product category"),
        "brand": ("vendor",),
        "published": ("published",),
        "status": ("status",),
        "sku": ("variant sku",),
        "price": ("variant price",),
        "compare_at_price": ("variant compare at price",),
        "inventory": ("variant inventory qty",),
        "track_inventory": ("variant inventory tracker",),
        "requires_shipping": ("variant requires shipping",),
        "image": ("image src",),
        "option1_name": ("option1 name",),
        "option1_value": ("option1 value",),
        "option2_name": ("option2 name",),
        "option2_value": ("option2 value",),
        "option3_name": ("option3 name",),
        "option3_value": ("option3 value",),
    },
    required_columns=("key", "title"),
    required_headers=("handle", "title"),
    distinctive_headers=("option1 name", "option1 value", "variant price", "variant sku", "body (html)"),
    min_distinctive=2,
    classify_row=_shopify_row_role,
    requires_shipping=_shopify_requires_shipping,
    status=_shopify_status,
    track_inventory=_shopify_track_inventory,
    option_slots=(
        OptionSlot("option1_name", "option1_value"),
        OptionSlot("option2_name", "option2_value"),
        OptionSlot("option3_name", "option3_value"),
    ),
    category_columns=("category", "brand"),
)

WOOCOMMERCE = PlatformDialect(
    format=ImportFormat.WOOCOMMERCE,
    label="WooCommerce",
    columns={
        "row_type": ("type",),
        "id": ("id",),
        "sku": ("sku",),
        "parent": ("parent",),
        "title": ("name",),
        "description": ("description",),
        "short_description": ("short description",),
        "category": ("categories",),
        "published": ("published",),
        "price": ("regular price",),
        "sale_price": ("sale price",),
        "inventory": ("stock",),
        "track_inventory": ("manage stock",),
        "in_stock": ("in stock",),
        "virtual": ("virtual",),
        "downloadable": ("downloadable",),
        "image": ("images",),
        "option1_name": ("attribute 1 name",),
        "option1_value": ("attribute 1 value(s)", "attribute 1 values"),
        "option2_name": ("attribute 2 name",),
        "option2_value": ("attribute 2 value(s)", "attribute 2 values"),
        "option3_name": ("attribute 3 name",),
        "option3_value": ("attribute 3 value(s)", "attribute 3 values"),
    },
    required_columns=("row_type", "title"),
    required_headers=("type", "name"),
    distinctive_headers=(
        "sku", "regular price", "sale price", "parent",
        "in stock", "attribute 1 name", "short description",
    ),
    min_distinctive=2,
    classify_row=_woocommerce_row_role,
    requires_shipping=_woocommerce_requires_shipping,
    status=_woocommerce_status,
    track_inventory=_woocommerce_track_inventory,
    key_columns=("id", "sku", "title"),
    reference_columns=("id", "sku"),
    parent_column="parent",
    option_slots=(
        OptionSlot("option1_name", "option1_value"),
        OptionSlot("option2_name", "option2_value"),
        OptionSlot("option3_name", "option3_value"),
    ),
    split_images=True,
    description_columns=("description", "short_description"),
    category_separator=",",
    category_hierarchy_separator=">",
)

BIGCOMMERCE = PlatformDialect(
    format=ImportFormat.BIGCOMMERCE,
    label="BigCommerce",
    columns={
        "row_type": ("item type",),
        "id": ("product id",),
        "title": ("product name",),
        "product_type": ("product type",),
        "sku": ("product code/sku", "sku"),
        "price": ("price",),
        "sale_price": ("sale price",),
        "compare_at_price": ("retail price",),
        "inventory": ("stock level", "current stock level"),
        "track_inventory": ("track inventory",),
        "in_stock": ("allow purchases",),
        "published": ("product visible",),
        "category": ("categories", "category"),
        "description": ("product description", "description"),
        "brand": ("brand name", "brand"),
    },
    required_columns=("row_type", "title"),
    required_headers=("item type", "product name"),
    distinctive_headers=(
        "product code/sku", "product type", "track inventory",
        "product image file - 1", "allow purchases", "product visible", "option set",
    ),
    min_distinctive=2,
    classify_row=_bigcommerce_row_role,
    requires_shipping=_bigcommerce_requires_shipping,
    status=_bigcommerce_status,
    track_inventory=_bigcommerce_track_inventory,
    key_columns=("id", "sku", "title"),
    parse_title_options=parse_bigcommerce_options,
    image_series=(
        "product image url - {n}",
        "product image file - {n}",
        "product image file {n}",
    ),
    category_columns=("category", "brand"),
    category_separator=";",
)

# Auto-detection precedence: first match wins
DETECTION_ORDER: tuple[PlatformDialect, ...] = (SHOPIFY, BIGCOMMERCE, WOOCOMMERCE)

DIALECTS: dict[ImportFormat, PlatformDialect] = {
    dialect.format: dialect for dialect in DETECTION_ORDER
}


# ===================
# DETECTION
# ===================

def matches_dialect(headers: list[str], dialect: PlatformDialect) -> bool:
    """Required headers all present and enough vendor-specific headers."""
    normalized = {normalize_header(h) for h in headers}
    if not all(required in normalized for required in dialect.required_headers):
        return False
    matches = sum(1 for header in dialect.distinctive_headers if header in normalized)
    return matches >= dialect.min_distinctive


def is_shopify_format(headers: list[str]) -> bool:
    return matches_dialect(headers, SHOPIFY)


def is_woocommerce_format(headers: list[str]) -> bool:
    return matches_dialect(headers, WOOCOMMERCE)


def is_bigcommerce_format(headers: list[str]) -> bool:
    return matches_dialect(headers, BIGCOMMERCE)


def detect_platform(headers: list[str]) -> Optional[PlatformDialect]:
    """
    Find the platform whose export these headers come from.

    Dialects are checked in DETECTION_ORDER and the first match wins, so a
    file that looks like both Shopify and WooCommerce is read as Shopify.

    Returns:
        Matching PlatformDialect, or None for a generic spreadsheet
    """
    for dialect in DETECTION_ORDER:
        if matches_dialect(headers, dialect):
            logger.info("platform_format_detected", platform=dialect.format.value)
            return dialect
    return None


def get_dialect(import_format: ImportFormat) -> PlatformDialect:
    """Dialect for a platform format (KeyError for AUTO/STANDARD)."""
    return DIALECTS[import_format]


# ===================
# COLUMN LOCATOR
# ===================

def locate_columns(headers: list[str], dialect: PlatformDialect) -> ColumnLocator:
    """
    Resolve each logical column of the dialect to a header index.

    For every logical column the first alias present wins; within an
    alias the first matching header wins.
    """
    normalized = [normalize_header(h) for h in headers]
    positions: dict[str, int] = {}
    for index, header in enumerate(normalized):
        positions.setdefault(header, index)

    locator = ColumnLocator(dialect=dialect)
    for logical, aliases in dialect.columns.items():
        for alias in aliases:
            if alias in positions:
                locator.indices[logical] = positions[alias]
                break

    if "image" in locator.indices:
        locator.image_indices.append(locator.indices.pop("image"))

    for n in range(1, dialect.image_series_count + 1):
        for pattern in dialect.image_series:
            header = pattern.format(n=n)
            if header in positions and positions[header] not in locator.image_indices:
                locator.image_indices.append(positions[header])

    return locator
