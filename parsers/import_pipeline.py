"""
Product import entry point.

Picks the file layout (auto-detected or forced by the caller), runs the
matching parser and returns a single ImportParseResult.
"""

from typing import Optional, Union
import structlog

from parsers.column_mapping import ColumnMapping, detect_column_mapping
from parsers.csv_reader import parse_csv
from parsers.platform_formats import detect_platform, get_dialect
from parsers.platform_parser import parse_platform_table
from parsers.product_csv_parser import validate_and_transform
from parsers.records import ImportErrorRecord, ImportFormat, ImportParseResult

logger = structlog.get_logger(__name__)


def parse_import(
    content: str,
    import_format: Union[ImportFormat, str] = ImportFormat.AUTO,
    mapping: Optional[ColumnMapping] = None,
    currency: Optional[str] = None,
) -> ImportParseResult:
    """
    Parse an import file into product records.

    Args:
        content: CSV text
        import_format: AUTO to detect, or a format to force
        mapping: Column mapping for the standard layout (detected if omitted)
        currency: Store currency for price conversion

    Returns:
        ImportParseResult; problems are in .errors, nothing is raised for
        bad data
    """
    import_format = ImportFormat(import_format)
    table = parse_csv(content)

    if table.is_empty:
        logger.warning("import_file_empty")
        resolved = ImportFormat.STANDARD if import_format is ImportFormat.AUTO else import_format
        return ImportParseResult(
            format=resolved,
            errors=[ImportErrorRecord(row=0, field="file", message="CSV file is empty or invalid")]
        )

    if import_format is ImportFormat.AUTO:
        dialect = detect_platform(table.headers)
        import_format = dialect.format if dialect else ImportFormat.STANDARD

    if import_format is ImportFormat.STANDARD:
        mapping = mapping or detect_column_mapping(table.headers)
        products, errors = validate_and_transform(
            table.rows,
            mapping,
            currency=currency,
            header_count=len(table.headers),
        )
        result = ImportParseResult(
            format=ImportFormat.STANDARD,
            headers=table.headers,
            mapping=mapping.to_dict(),
            products=products,
            errors=errors,
        )
    else:
        batch, errors = parse_platform_table(table, get_dialect(import_format), currency)
        result = ImportParseResult(
            format=batch.platform,
            headers=table.headers,
            products=batch.products,
            errors=errors,
        )

    logger.info(
        "import_file_parsed",
        format=result.format.value,
        row_count=table.row_count,
        product_count=result.product_count,
        variant_count=result.variant_count,
        error_count=len(result.errors)
    )

    return result
