"""
Product import parsers.

Standard spreadsheets and Shopify / WooCommerce / BigCommerce exports.
"""

from parsers.records import (
    ImportFormat,
    CSVParseResult,
    ImportErrorRecord,
    StandardProductRecord,
    VariantRecord,
    VariantOptionDefinition,
    PlatformProductRecord,
    PlatformImportBatch,
    ImportParseResult,
)
from parsers.csv_reader import parse_csv, decode_csv_bytes
from parsers.column_mapping import ColumnMapping, detect_column_mapping
from parsers.product_csv_parser import transform_row, validate_and_transform
from parsers.platform_formats import (
    PlatformDialect,
    SHOPIFY,
    WOOCOMMERCE,
    BIGCOMMERCE,
    detect_platform,
    is_shopify_format,
    is_woocommerce_format,
    is_bigcommerce_format,
    locate_columns,
)
from parsers.platform_parser import (
    parse_platform_csv,
    parse_platform_rows,
    transform_to_import_products,
)
from parsers.import_pipeline import parse_import

__all__ = [
    # Records
    "ImportFormat",
    "CSVParseResult",
    "ImportErrorRecord",
    "StandardProductRecord",
    "VariantRecord",
    "VariantOptionDefinition",
    "PlatformProductRecord",
    "PlatformImportBatch",
    "ImportParseResult",

    # Standard layout
    "parse_csv",
    "decode_csv_bytes",
    "ColumnMapping",
    "detect_column_mapping",
    "transform_row",
    "validate_and_transform",

    # Platform layouts
    "PlatformDialect",
    "SHOPIFY",
    "WOOCOMMERCE",
    "BIGCOMMERCE",
    "detect_platform",
    "is_shopify_format",
    "is_woocommerce_format",
    "is_bigcommerce_format",
    "locate_columns",
    "parse_platform_csv",
    "parse_platform_rows",
    "transform_to_import_products",

    # Entry point
    "parse_import",
]
