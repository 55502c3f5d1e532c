"""
Product import routes.

Two steps: preview parses an uploaded CSV and returns the products and
errors without writing anything; commit creates the reviewed products
one at a time.
"""

import json
from fastapi import APIRouter, UploadFile, File, Form
from typing import Optional
import structlog

from config import get_settings
from exceptions import ImportFileError
from models.product_import import (
    ImportCommitRequest,
    ImportPreviewResponse,
    ImportRunResponse,
)
from parsers import ColumnMapping, ImportFormat, decode_csv_bytes, parse_import
from routes.products import handle_error
from services.product_import_service import get_product_import_service

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# ROUTES
# ===================

@router.post("/preview", response_model=ImportPreviewResponse)
async def preview_import(
    file: UploadFile = File(...),
    format: ImportFormat = Form(ImportFormat.AUTO),
    mapping: Optional[str] = Form(None, description="JSON object: field name -> column index"),
):
    """
    Parse a product CSV without saving anything.

    The format is detected unless one is given. For the standard layout
    a column mapping may be supplied to override the detected one.

    Raises:
        422: Not a CSV, too large, or an unreadable mapping
    """
    logger.info(
        "import_preview_started",
        filename=file.filename,
        content_type=file.content_type,
        format=format.value
    )

    try:
        settings = get_settings()

        if not (file.filename or "").lower().endswith(".csv"):
            raise ImportFileError("Please upload a CSV file", details={"filename": file.filename})

        content = await file.read()
        if len(content) > settings.import_max_file_bytes:
            raise ImportFileError(
                "File is too large",
                details={"size_bytes": len(content), "max_bytes": settings.import_max_file_bytes}
            )

        column_mapping = _parse_mapping(mapping)

        result = parse_import(
            decode_csv_bytes(content),
            import_format=format,
            mapping=column_mapping,
            currency=settings.store_currency,
        )

        return ImportPreviewResponse.from_result(result)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ImportRunResponse)
async def commit_import(request: ImportCommitRequest):
    """
    Create the given products, strictly one after another.

    A product that fails is reported with its 1-based position and the
    rest continue. Nothing is retried.
    """
    logger.info("import_commit_started", product_count=len(request.products))

    try:
        service = get_product_import_service()

        result = service.run(
            request.products,
            on_progress=lambda done, total: logger.debug(
                "import_commit_progress",
                processed=done,
                total=total
            ),
        )

        return ImportRunResponse(**result.to_dict())

    except Exception as e:
        return handle_error(e)


# ===================
# HELPER FUNCTIONS
# ===================

def _parse_mapping(raw: Optional[str]) -> Optional[ColumnMapping]:
    """Decode the mapping form field (JSON object of field -> column index)."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("mapping must be a JSON object")
        return ColumnMapping.from_dict(data)
    except (ValueError, TypeError) as e:
        raise ImportFileError("Invalid column mapping", details={"error": str(e)})
