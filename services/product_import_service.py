"""
Product import orchestrator.

Submits parsed products to the repository one at a time, in file order.
A failed product is recorded and the loop moves on; nothing is retried.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol
import structlog

from exceptions import AppError
from models.product import ProductCreateResult
from services.product_service import get_product_service

logger = structlog.get_logger(__name__)


class ProductRepository(Protocol):
    """Anything that can create one product from an import record."""

    def create_from_import(self, record: Any) -> ProductCreateResult:
        ...


# ===================
# DATA CLASSES
# ===================

@dataclass
class ImportFailure:
    """A product the repository rejected. row is the 1-based position in the batch."""
    row: int
    message: str
    product_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {"row": self.row, "product_name": self.product_name, "message": self.message}


@dataclass
class ImportRunResult:
    """Counters for one import run."""
    total: int = 0
    success: int = 0
    failed: int = 0
    variants_created: int = 0
    processed: int = 0
    stopped: bool = False
    errors: list[ImportFailure] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "variants_created": self.variants_created,
            "processed": self.processed,
            "stopped": self.stopped,
            "errors": [e.to_dict() for e in self.errors],
        }


# ===================
# SERVICE
# ===================

class ProductImportService:
    """
    Sequential import driver.

    One repository call at a time; the next starts only after the
    previous one has returned or failed.
    """

    def __init__(self, repository: ProductRepository):
        self.repository = repository

    def run(
        self,
        records: list[Any],
        should_continue: Optional[Callable[[], bool]] = None,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> ImportRunResult:
        """
        Create every record, in order.

        Args:
            records: Parsed products (parser records or ProductCreate)
            should_continue: Checked before each submission; False stops the run
            on_progress: Called with (processed, total) after each submission

        Returns:
            ImportRunResult with counts and one failure per rejected record
        """
        result = ImportRunResult(total=len(records))

        logger.info("product_import_started", total=result.total)

        for index, record in enumerate(records):
            if should_continue is not None and not should_continue():
                result.stopped = True
                logger.info("product_import_stopped", processed=result.processed, total=result.total)
                break

            name = getattr(record, "name", None)

            try:
                created = self.repository.create_from_import(record)
            except AppError as e:
                self._record_failure(result, index, name, e.message, e.code)
            except Exception as e:
                logger.error(
                    "product_import_unexpected_error",
                    row=index + 1,
                    error=str(e),
                    error_type=type(e).__name__
                )
                self._record_failure(result, index, name, "Failed to import", type(e).__name__)
            else:
                result.success += 1
                result.variants_created += created.variants_created

            result.processed += 1
            if on_progress is not None:
                on_progress(result.processed, result.total)

        logger.info(
            "product_import_finished",
            total=result.total,
            success=result.success,
            failed=result.failed,
            variants_created=result.variants_created,
            stopped=result.stopped
        )

        return result

    @staticmethod
    def _record_failure(
        result: ImportRunResult,
        index: int,
        name: Optional[str],
        message: str,
        code: str,
    ) -> None:
        result.failed += 1
        result.errors.append(ImportFailure(row=index + 1, message=message, product_name=name))
        logger.warning(
            "product_import_failed",
            row=index + 1,
            product_name=name,
            code=code,
            message=message
        )


def get_product_import_service() -> ProductImportService:
    """Import service backed by the Supabase product repository."""
    return ProductImportService(get_product_service())
