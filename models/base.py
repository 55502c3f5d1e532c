"""
Shared pydantic configuration for request and response schemas.
"""

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class BaseSchema(BaseModel):
    """
    Base for API schemas.

    Strings are trimmed, assignments re-validated, and rows coming back
    from Supabase can be loaded by attribute.
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class TimestampMixin(BaseModel):
    """Row timestamps set by the database."""
    created_at: datetime
    updated_at: Optional[datetime] = None


def page_count(total: int, page_size: int) -> int:
    """Number of pages needed for total items (0 when there are none)."""
    if page_size <= 0:
        return 0
    return (total + page_size - 1) // page_size
