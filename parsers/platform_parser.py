"""
Platform export parser (Shopify, WooCommerce, BigCommerce).

Platform exports are denormalized: one product spans several rows, one
per variant. Rows are grouped back into products and each group is
turned into a PlatformProductRecord. The algorithm is shared; the
per-platform differences live in the PlatformDialect tables.

Row numbers in errors count the header as row 1, so the first data row
is row 2 (what a spreadsheet shows). Row 0 marks file-level problems.
"""

from dataclasses import dataclass, field
from typing import Optional
import structlog

from parsers.csv_reader import parse_csv
from parsers.platform_formats import (
    ColumnLocator,
    PlatformDialect,
    RowRole,
    locate_columns,
    matches_dialect,
)
from parsers.product_csv_parser import is_valid_url, parse_amount, parse_count
from parsers.records import (
    CSVParseResult,
    ImportErrorRecord,
    PlatformImportBatch,
    PlatformProductRecord,
    VariantRecord,
)
from utils.currency import to_smallest_unit
from utils.text_utils import is_truthy

logger = structlog.get_logger(__name__)


# ===================
# DATA CLASSES
# ===================

@dataclass
class PlatformVariantRow:
    """One row's variant data, prices already in the smallest unit."""
    row: int
    options: list[tuple[str, str]] = field(default_factory=list)
    sku: Optional[str] = None
    price: Optional[int] = None  # None until defaulted from the product row
    compare_at_price: Optional[int] = None
    inventory_count: int = 0
    requires_shipping: Optional[bool] = None
    is_active: bool = True

    @property
    def first_option_value(self) -> str:
        return self.options[0][1] if self.options else ""


@dataclass
class PlatformProductGroup:
    """All rows of one product, reduced to product-level attributes."""
    key: str
    row: int
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    status: str = "active"
    track_inventory: Optional[bool] = None
    images: list[str] = field(default_factory=list)
    variants: list[PlatformVariantRow] = field(default_factory=list)


@dataclass
class _RowBucket:
    """Raw rows collected for one product before reduction."""
    key: str
    row: int
    product_cells: dict[str, str]
    product_images: list[str]
    variant_rows: list[tuple[int, dict[str, str], list[str]]] = field(default_factory=list)


# ===================
# MAIN PARSER
# ===================

def parse_platform_csv(
    content: str,
    dialect: PlatformDialect,
    currency: Optional[str] = None,
) -> tuple[PlatformImportBatch, list[ImportErrorRecord]]:
    """
    Parse a platform export end to end.

    Args:
        content: CSV text
        dialect: Platform to read the file as (not re-detected)
        currency: Store currency for price conversion

    Returns:
        Tuple of (batch of reconstructed products, errors)
    """
    return parse_platform_table(parse_csv(content), dialect, currency)


def parse_platform_table(
    table: CSVParseResult,
    dialect: PlatformDialect,
    currency: Optional[str] = None,
) -> tuple[PlatformImportBatch, list[ImportErrorRecord]]:
    """Same as parse_platform_csv for an already tokenized file."""
    if not matches_dialect(table.headers, dialect):
        # Forced format: still parsed, required-column check decides
        logger.info("platform_headers_unrecognized", platform=dialect.format.value)

    groups, errors = parse_platform_rows(table.rows, table.headers, dialect, currency)
    products = transform_to_import_products(groups)
    return PlatformImportBatch(platform=dialect.format, products=products), errors


def parse_platform_rows(
    rows: list[list[str]],
    headers: list[str],
    dialect: PlatformDialect,
    currency: Optional[str] = None,
) -> tuple[list[PlatformProductGroup], list[ImportErrorRecord]]:
    """
    Group rows into products and reduce each group.

    Missing required columns abort with one row-0 error. Rows without a
    usable key, and groups without a title, are reported and left out;
    every other group is returned.
    """
    locator = locate_columns(headers, dialect)

    missing = locator.missing_required()
    if missing:
        column = dialect.column_label(missing[0])
        logger.warning("platform_columns_missing", platform=dialect.format.value, missing=missing)
        return [], [ImportErrorRecord(
            row=0,
            field="mapping",
            message=f"{column} column is required for {dialect.label} format"
        )]

    buckets, errors = _group_rows(rows, locator)

    groups = []
    for bucket in buckets:
        group = _reduce_bucket(bucket, dialect, currency, errors)
        if group is not None:
            groups.append(group)

    errors.sort(key=lambda e: e.row)

    logger.info(
        "platform_rows_grouped",
        platform=dialect.format.value,
        total_rows=len(rows),
        product_count=len(groups),
        error_count=len(errors)
    )

    return groups, errors


def transform_to_import_products(groups: list[PlatformProductGroup]) -> list[PlatformProductRecord]:
    """Build one PlatformProductRecord per reduced product group."""
    return [_to_record(group) for group in groups]


# ===================
# GROUPING
# ===================

def _group_rows(
    rows: list[list[str]],
    locator: ColumnLocator,
) -> tuple[list[_RowBucket], list[ImportErrorRecord]]:
    dialect = locator.dialect
    buckets: list[_RowBucket] = []
    references: dict[str, int] = {}
    pending: dict[str, list[tuple[int, dict[str, str], list[str]]]] = {}
    errors: list[ImportErrorRecord] = []
    current: Optional[int] = None

    for index, row in enumerate(rows):
        row_number = index + 2
        cells = locator.read(row)
        images = locator.read_images(row)
        role = dialect.classify_row(cells)

        if role is RowRole.SKIP:
            continue

        if role is RowRole.PRODUCT_AND_VARIANT:
            key = cells.get("key", "")
            if not key:
                label = dialect.column_label("key").lower()
                errors.append(ImportErrorRecord(row=row_number, field=label, message=f"Missing {label}"))
                continue
            position = references.get(key)
            if position is None:
                position = len(buckets)
                references[key] = position
                buckets.append(_RowBucket(
                    key=key,
                    row=row_number,
                    product_cells=cells,
                    product_images=[],
                ))
            buckets[position].variant_rows.append((row_number, cells, images))

        elif role is RowRole.PRODUCT:
            key = _first_value(cells, dialect.key_columns) or f"row-{row_number}"
            position = len(buckets)
            buckets.append(_RowBucket(key=key, row=row_number, product_cells=cells, product_images=images))
            for column in dialect.reference_columns:
                reference = cells.get(column, "")
                if reference:
                    references.setdefault(reference, position)
                    if column == "id":
                        references.setdefault(f"id:{reference}", position)
            current = position

        else:
            if dialect.parent_column is None:
                if current is None:
                    errors.append(ImportErrorRecord(
                        row=row_number,
                        field="parent",
                        message="Variant row has no preceding product row"
                    ))
                    continue
                buckets[current].variant_rows.append((row_number, cells, images))
                continue

            reference = cells.get(dialect.parent_column, "")
            if not reference:
                errors.append(ImportErrorRecord(
                    row=row_number,
                    field="parent",
                    message="Variation missing parent reference"
                ))
                continue
            pending.setdefault(reference, []).append((row_number, cells, images))

    # Variations may appear before their parent, so link after the pass
    for reference, variant_rows in pending.items():
        position = references.get(reference)
        if position is None:
            errors.append(ImportErrorRecord(
                row=0,
                field="parent",
                message=(
                    f"Could not find parent product for {len(variant_rows)} "
                    f'variation(s) with parent "{reference}"'
                )
            ))
            continue
        buckets[position].variant_rows.extend(variant_rows)

    return buckets, errors


# ===================
# REDUCTION
# ===================

def _reduce_bucket(
    bucket: _RowBucket,
    dialect: PlatformDialect,
    currency: Optional[str],
    errors: list[ImportErrorRecord],
) -> Optional[PlatformProductGroup]:
    cells = bucket.product_cells
    title = cells.get("title", "")
    if not title:
        errors.append(ImportErrorRecord(row=bucket.row, field="title", message="Missing product title"))
        return None

    group = PlatformProductGroup(
        key=bucket.key,
        row=bucket.row,
        title=title,
        description=_join_description(cells, dialect.description_columns),
        category=_first_category(cells, dialect),
        status=dialect.status(cells),
        track_inventory=dialect.track_inventory(cells),
    )

    product_shipping = dialect.requires_shipping(cells)
    # Product row prices are only a fallback for variant rows that leave price blank
    default_price, default_compare_at = _read_prices(cells, bucket.row, currency, [])
    _add_images(group.images, bucket.product_images, bucket.row, errors)

    if bucket.variant_rows:
        variant_rows = sorted(bucket.variant_rows, key=lambda item: item[0])
        for row_number, variant_cells, images in variant_rows:
            _add_images(group.images, images, row_number, errors)
            variant = _read_variant(row_number, variant_cells, cells, dialect, currency, errors)
            if variant.price is None:
                variant.price = default_price or 0
                variant.compare_at_price = variant.compare_at_price or default_compare_at
            if variant.requires_shipping is None:
                variant.requires_shipping = product_shipping
            group.variants.append(variant)
    else:
        # Product without variant rows sells as a single default variant
        variant = _read_variant(bucket.row, cells, cells, dialect, currency, errors)
        variant.options = []
        variant.price = variant.price or 0
        group.variants.append(variant)

    return group


def _read_variant(
    row_number: int,
    cells: dict[str, str],
    product_cells: dict[str, str],
    dialect: PlatformDialect,
    currency: Optional[str],
    errors: list[ImportErrorRecord],
) -> PlatformVariantRow:
    """Variant data of one row. price is None when the row has no price."""
    price, compare_at = _read_prices(cells, row_number, currency, errors)
    in_stock = cells.get("in_stock", "")

    return PlatformVariantRow(
        row=row_number,
        options=_read_options(cells, product_cells, dialect),
        sku=cells.get("sku") or None,
        price=price,
        compare_at_price=compare_at,
        inventory_count=_read_inventory(cells, row_number, errors),
        requires_shipping=dialect.requires_shipping(cells),
        is_active=_is_in_stock(in_stock) if in_stock else True,
    )


def _read_prices(
    cells: dict[str, str],
    row_number: int,
    currency: Optional[str],
    errors: list[ImportErrorRecord],
) -> tuple[Optional[int], Optional[int]]:
    """
    Selling price and compare-at price of one row.

    A positive sale price is what the customer pays; the regular price
    then becomes the compare-at price.
    """
    regular = _read_price(cells, "price", row_number, currency, errors)
    sale = _read_price(cells, "sale_price", row_number, currency, errors)
    compare_at = _read_price(cells, "compare_at_price", row_number, currency, errors)

    if sale:
        return sale, regular or compare_at
    return regular, compare_at


def _read_options(
    cells: dict[str, str],
    product_cells: dict[str, str],
    dialect: PlatformDialect,
) -> list[tuple[str, str]]:
    if dialect.parse_title_options is not None:
        return dialect.parse_title_options(cells.get("title", ""))

    options = []
    for position, slot in enumerate(dialect.option_slots, start=1):
        value = cells.get(slot.value_column, "")
        name = (
            cells.get(slot.name_column, "")
            or product_cells.get(slot.name_column, "")
            or f"Option {position}"
        )
        options.append((name, value))
    return options


def _read_price(
    cells: dict[str, str],
    column: str,
    row_number: int,
    currency: Optional[str],
    errors: list[ImportErrorRecord],
) -> Optional[int]:
    raw = cells.get(column, "")
    if not raw:
        return None
    amount = parse_amount(raw)
    if amount is None or amount < 0:
        errors.append(ImportErrorRecord(row=row_number, field=column, message=f'Invalid price: "{raw}"'))
        return None
    return to_smallest_unit(amount, currency)


def _read_inventory(cells: dict[str, str], row_number: int, errors: list[ImportErrorRecord]) -> int:
    raw = cells.get("inventory", "")
    if not raw:
        return 0
    count = parse_count(raw)
    if count is None:
        errors.append(ImportErrorRecord(
            row=row_number,
            field="inventory_count",
            message=f'Invalid inventory count: "{raw}"'
        ))
        return 0
    # Oversold stock is exported as a negative quantity
    return max(count, 0)


def _is_in_stock(value: str) -> bool:
    return is_truthy(value, extra=("instock", "backorder", "onbackorder"))


def _add_images(
    images: list[str],
    candidates: list[str],
    row_number: int,
    errors: list[ImportErrorRecord],
) -> None:
    for url in candidates:
        if url in images:
            continue
        if is_valid_url(url):
            images.append(url)
        else:
            errors.append(ImportErrorRecord(row=row_number, field="images", message=f'Invalid image URL: "{url}"'))


def _join_description(cells: dict[str, str], columns: tuple[str, ...]) -> Optional[str]:
    parts = [cells.get(column, "") for column in columns]
    text = "\n\n".join(part for part in parts if part)
    return text or None


def _first_category(cells: dict[str, str], dialect: PlatformDialect) -> Optional[str]:
    for column in dialect.category_columns:
        value = cells.get(column, "")
        if not value:
            continue
        if dialect.category_separator:
            value = next((part.strip() for part in value.split(dialect.category_separator) if part.strip()), "")
        if dialect.category_hierarchy_separator:
            value = value.split(dialect.category_hierarchy_separator)[-1].strip()
        if value:
            return value
    return None


def _first_value(cells: dict[str, str], columns: tuple[str, ...]) -> str:
    for column in columns:
        value = cells.get(column, "")
        if value:
            return value
    return ""


# ===================
# RECORD BUILDING
# ===================

def _to_record(group: PlatformProductGroup) -> PlatformProductRecord:
    rows = group.variants
    has_variants = len(rows) > 1 or (len(rows) == 1 and bool(rows[0].first_option_value))
    base_price = rows[0].price if rows else 0

    record = PlatformProductRecord(
        name=group.title,
        description=group.description,
        price=base_price,
        images=list(group.images),
        category=group.category,
        # Digital only when every variant explicitly skips shipping
        is_digital=bool(rows) and all(v.requires_shipping is False for v in rows),
        status=group.status,
        has_variants=has_variants,
    )

    if has_variants:
        record.variants = [_to_variant(v, index, base_price) for index, v in enumerate(rows, start=1)]
        record.variant_options = _used_option_names(rows)
        record.track_inventory = False
        record.inventory_count = None
    else:
        total = sum(v.inventory_count for v in rows)
        track = group.track_inventory if group.track_inventory is not None else total > 0
        record.track_inventory = track
        record.inventory_count = total

    record.apply_digital_rules()
    return record


def _to_variant(row: PlatformVariantRow, position: int, base_price: int) -> VariantRecord:
    values = [value for _, value in row.options if value]
    return VariantRecord(
        name=" / ".join(values) or f"Variant {position}",
        sku=row.sku,
        price_adjustment=row.price - base_price,
        inventory_count=row.inventory_count,
        track_inventory=True,
        options={name: value for name, value in row.options if value},
        is_active=row.is_active,
        compare_at_price=row.compare_at_price,
    )


def _used_option_names(rows: list[PlatformVariantRow]) -> list[str]:
    names: list[str] = []
    for row in rows:
        for name, value in row.options:
            if value and name not in names:
                names.append(name)
    return names
