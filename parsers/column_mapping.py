"""
Column mapping for generic (non-platform) product spreadsheets.

Guesses which header holds each product field using an ordered
candidate list per field. The caller may override any guess.
"""

from dataclasses import dataclass, fields, asdict
from typing import Optional, Mapping, Any
import structlog

from parsers.records import ImportErrorRecord

logger = structlog.get_logger(__name__)


# ===================
# DATA CLASSES
# ===================

@dataclass
class ColumnMapping:
    """Header index for each product field (None = not present)."""
    name: Optional[int] = None
    description: Optional[int] = None
    price: Optional[int] = None
    images: Optional[int] = None
    category: Optional[int] = None
    is_digital: Optional[int] = None
    track_inventory: Optional[int] = None
    inventory_count: Optional[int] = None

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ColumnMapping":
        """Build from a user-supplied mapping; unknown keys are ignored."""
        known = set(cls.field_names())
        values = {}
        for key, value in data.items():
            if key not in known:
                continue
            values[key] = _column_index(key, value)
        return cls(**values)

    def validate(self, header_count: int) -> list[ImportErrorRecord]:
        """Every mapped index must point at an existing header."""
        errors = []
        for name, index in asdict(self).items():
            if index is None:
                continue
            if index < 0 or index >= header_count:
                errors.append(ImportErrorRecord(
                    row=0,
                    field="mapping",
                    message=f"Column index {index} for '{name}' is out of range"
                ))
        return errors

    def to_dict(self) -> dict[str, Optional[int]]:
        return asdict(self)


def _column_index(key: str, value: Any) -> Optional[int]:
    """Accept an int or a string of digits; booleans and floats are rejected."""
    if value is None or value == "":
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValueError(f"Column index for '{key}' must be an integer, got {value!r}")


# ===================
# COLUMN MAPPINGS
# ===================

# Order matters: earlier candidates win
COLUMN_CANDIDATES: dict[str, list[str]] = {
    "name": ["name", "title", "product name", "product_name", "product title"],
    "description": ["description", "desc", "details", "product description", "body", "content"],
    "price": ["price", "cost", "amount", "unit price", "unit_price"],
    "images": ["image", "images", "image url", "image_url", "photo", "photos", "picture", "pictures"],
    "category": ["category", "type", "collection", "group", "product type"],
    "is_digital": ["is_digital", "digital", "downloadable", "virtual"],
    "track_inventory": ["track_inventory", "track inventory", "track stock"],
    "inventory_count": ["inventory", "inventory_count", "stock", "quantity", "qty", "count"],
}


# ===================
# MAIN FUNCTION
# ===================

def detect_column_mapping(headers: list[str]) -> ColumnMapping:
    """
    Guess the column for each product field.

    For each field, candidates are tried in order; the first header that
    equals or contains the candidate wins. Several fields may end up on
    the same column.

    Args:
        headers: Header row as read from the file

    Returns:
        ColumnMapping (fields without a match stay None)
    """
    normalized = [h.strip().lower() for h in headers]
    mapping = ColumnMapping()

    for field_name, candidates in COLUMN_CANDIDATES.items():
        setattr(mapping, field_name, _find_column(normalized, candidates))

    logger.debug(
        "column_mapping_detected",
        mapped=[name for name, idx in mapping.to_dict().items() if idx is not None]
    )

    return mapping


# ===================
# HELPER FUNCTIONS
# ===================

def _find_column(headers: list[str], candidates: list[str]) -> Optional[int]:
    for candidate in candidates:
        for index, header in enumerate(headers):
            if header == candidate or candidate in header:
                return index
    return None
