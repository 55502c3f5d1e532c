"""
Text utilities for product names and import headers.
"""

import re
import unicodedata
from typing import Optional

SLUG_MAX_LENGTH = 100


def generate_slug(name: Optional[str]) -> str:
    """
    Build a URL slug from a product name.

    - "Classic Tee (Blue)" → "classic-tee-blue"
    - "Café  Crème" → "cafe-creme"

    Accents are folded to ASCII before anything else is stripped.

    Args:
        name: Product name

    Returns:
        Lowercase slug of at most 100 characters (may be empty)
    """
    if not name:
        return ""

    # NFD splits base chars from accents so the accents can be dropped
    normalized = unicodedata.normalize("NFD", name)
    ascii_name = "".join(c for c in normalized if unicodedata.category(c) != "Mn")

    slug = ascii_name.lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")

    return slug[:SLUG_MAX_LENGTH]


def normalize_header(header: Optional[str]) -> str:
    """
    Normalize a platform export header for exact matching.

    Lowercases, trims, collapses internal whitespace and drops a
    trailing question mark ("In stock?" → "in stock").
    """
    if not header:
        return ""
    value = re.sub(r"\s+", " ", header.strip().lower())
    return value.rstrip("?").strip()


def is_truthy(value: Optional[str], extra: tuple[str, ...] = ()) -> bool:
    """Case-insensitive yes/true/1/y check used for boolean CSV cells."""
    if not value:
        return False
    return value.strip().lower() in ("true", "yes", "1", "y", *extra)
