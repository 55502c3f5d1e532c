"""
Standard product CSV parser.

Turns generic spreadsheet rows into StandardProductRecord values using a
ColumnMapping. Every row is processed; problems are collected as
ImportErrorRecord values and never raised.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional
import structlog

from pydantic import AnyUrl, TypeAdapter, ValidationError as PydanticValidationError

from parsers.column_mapping import ColumnMapping
from parsers.records import ImportErrorRecord, StandardProductRecord, get_cell
from utils.currency import to_smallest_unit
from utils.text_utils import is_truthy

logger = structlog.get_logger(__name__)

CURRENCY_SYMBOLS = re.compile(r"[$,€£¥₩]")

_url_adapter = TypeAdapter(AnyUrl)


# ===================
# MAIN PARSER
# ===================

def validate_and_transform(
    rows: list[list[str]],
    mapping: ColumnMapping,
    currency: Optional[str] = None,
    header_count: Optional[int] = None,
) -> tuple[list[StandardProductRecord], list[ImportErrorRecord]]:
    """
    Transform every data row into a product record.

    Args:
        rows: Data rows (header excluded)
        mapping: Column index per product field
        currency: Store currency for price conversion
        header_count: When given, mapped indices are checked against it

    Returns:
        Tuple of (records, errors). Row numbers in errors are 1-based
        over the data rows; row 0 marks a mapping problem.
    """
    if mapping.name is None:
        logger.warning("product_csv_name_column_missing")
        return [], [ImportErrorRecord(row=0, field="mapping", message="Name column is required")]

    if header_count is not None:
        mapping_errors = mapping.validate(header_count)
        if mapping_errors:
            logger.warning("product_csv_mapping_invalid", error_count=len(mapping_errors))
            return [], mapping_errors

    products: list[StandardProductRecord] = []
    errors: list[ImportErrorRecord] = []

    for index, row in enumerate(rows):
        product, row_errors = transform_row(row, mapping, index + 1, currency)
        errors.extend(row_errors)
        if product is not None:
            products.append(product)

    logger.info(
        "product_csv_transformed",
        total_rows=len(rows),
        product_count=len(products),
        error_count=len(errors)
    )

    return products, errors


def transform_row(
    row: list[str],
    mapping: ColumnMapping,
    row_number: int,
    currency: Optional[str] = None,
) -> tuple[Optional[StandardProductRecord], list[ImportErrorRecord]]:
    """
    Transform a single row.

    A row without a name yields no record. Any other problem is reported
    and the affected field falls back to its default, so the record is
    still returned.
    """
    errors: list[ImportErrorRecord] = []

    name = get_cell(row, mapping.name)
    if not name:
        errors.append(ImportErrorRecord(row=row_number, field="name", message="Product name is required"))
        return None, errors

    price = _parse_price(get_cell(row, mapping.price), row_number, currency, errors)
    images = parse_image_list(get_cell(row, mapping.images), row_number, errors)

    is_digital = is_truthy(get_cell(row, mapping.is_digital))
    track_inventory = is_truthy(get_cell(row, mapping.track_inventory))

    inventory_count = None
    inventory_raw = get_cell(row, mapping.inventory_count)
    if inventory_raw:
        inventory_count = parse_count(inventory_raw)
        if inventory_count is None:
            errors.append(ImportErrorRecord(
                row=row_number,
                field="inventory_count",
                message=f'Invalid inventory count: "{inventory_raw}"'
            ))
        elif inventory_count < 0:
            errors.append(ImportErrorRecord(
                row=row_number,
                field="inventory_count",
                message=f'Inventory count cannot be negative: "{inventory_raw}"'
            ))
            inventory_count = None
        else:
            # A stock figure means stock is tracked
            track_inventory = True

    product = StandardProductRecord(
        name=name,
        description=get_cell(row, mapping.description),
        price=price,
        images=images,
        category=get_cell(row, mapping.category),
        is_digital=is_digital,
        track_inventory=track_inventory,
        inventory_count=inventory_count,
    )
    product.apply_digital_rules()

    return product, errors


# ===================
# HELPER FUNCTIONS
# ===================

def parse_amount(value: str) -> Optional[Decimal]:
    """
    Parse a price cell to a Decimal.

    Currency symbols and thousands separators are stripped. Returns None
    when what is left is not a finite number.
    """
    cleaned = CURRENCY_SYMBOLS.sub("", value).strip()
    if not cleaned:
        return Decimal("0")
    if "_" in cleaned:
        return None
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def parse_count(value: str) -> Optional[int]:
    """Parse a whole-number cell ("12", "12.0"); None if not a whole number."""
    value = value.strip()
    if not value or "_" in value:
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        amount = Decimal(value.replace(",", ""))
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount != amount.to_integral_value():
        return None
    return int(amount)


def is_valid_url(value: str) -> bool:
    """True if value parses as an absolute URL."""
    try:
        _url_adapter.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def parse_image_list(
    value: str,
    row_number: int,
    errors: list[ImportErrorRecord],
    field: str = "images",
) -> list[str]:
    """Split a comma-separated image cell, dropping and reporting bad URLs."""
    images = []
    for token in value.split(","):
        url = token.strip()
        if not url:
            continue
        if is_valid_url(url):
            images.append(url)
        else:
            errors.append(ImportErrorRecord(
                row=row_number,
                field=field,
                message=f'Invalid image URL: "{url}"'
            ))
    return images


def _parse_price(
    value: str,
    row_number: int,
    currency: Optional[str],
    errors: list[ImportErrorRecord],
) -> int:
    amount = parse_amount(value)
    if amount is None:
        errors.append(ImportErrorRecord(row=row_number, field="price", message=f'Invalid price: "{value}"'))
        return 0
    if amount < 0:
        errors.append(ImportErrorRecord(
            row=row_number,
            field="price",
            message=f'Price cannot be negative: "{value}"'
        ))
        return 0
    return to_smallest_unit(amount, currency)
