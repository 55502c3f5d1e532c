"""
Product service: reads and creates store products in Supabase.

Every query is scoped to the configured store. Creating a product also
writes its variants to product_variants.
"""

from typing import Any, Optional
import structlog

from config import get_supabase_client, get_settings, Settings
from models.product import (
    ProductCreate,
    ProductResponse,
    ProductCreateResult,
    ProductStatus,
)
from exceptions import (
    ProductNotFoundError,
    ProductLimitReachedError,
    StoreNotConfiguredError,
    DatabaseError
)
from utils.text_utils import generate_slug

logger = structlog.get_logger(__name__)


class ProductService:
    """
    Product business logic.

    Handles listing, lookup and creation of products for one store.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.db = get_supabase_client()
        self.settings = settings or get_settings()
        self.table = "products"
        self.variants_table = "product_variants"

    @property
    def store_id(self) -> str:
        if not self.settings.store_id:
            raise StoreNotConfiguredError()
        return self.settings.store_id

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(
        self,
        page: int = 1,
        page_size: int = 20,
        status: Optional[ProductStatus] = None
    ) -> tuple[list[ProductResponse], int]:
        """
        Get the store's products.

        Args:
            page: Page number (1-indexed)
            page_size: Items per page
            status: Filter by status

        Returns:
            Tuple of (products list, total count)
        """
        logger.info(
            "getting_products",
            page=page,
            page_size=page_size,
            status=status
        )

        store_id = self.store_id

        try:
            query = (
                self.db.table(self.table)
                .select("*", count="exact")
                .eq("store_id", store_id)
            )

            if status:
                query = query.eq("status", status.value)

            offset = (page - 1) * page_size
            query = query.range(offset, offset + page_size - 1)
            query = query.order("created_at", desc=True)

            result = query.execute()

            products = [ProductResponse(**row) for row in result.data]
            total = result.count or 0

            logger.info(
                "products_retrieved",
                count=len(products),
                total=total
            )

            return products, total

        except Exception as e:
            logger.error(
                "get_products_failed",
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def get_by_id(self, product_id: str) -> ProductResponse:
        """
        Get a single product by ID.

        Raises:
            ProductNotFoundError: If product doesn't exist in this store
        """
        logger.debug("getting_product", product_id=product_id)

        store_id = self.store_id

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", product_id)
                .eq("store_id", store_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "get_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProductNotFoundError(product_id)

        return ProductResponse(**result.data[0])

    def count(self) -> int:
        """Count the store's products."""
        store_id = self.store_id
        try:
            result = (
                self.db.table(self.table)
                .select("id", count="exact")
                .eq("store_id", store_id)
                .execute()
            )
            return result.count or 0
        except Exception as e:
            logger.error("count_products_failed", error=str(e))
            raise DatabaseError("count", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: ProductCreate) -> ProductCreateResult:
        """
        Create a product and its variants.

        Args:
            data: Product creation data

        Returns:
            ProductCreateResult with the created product and variant count

        Raises:
            ProductLimitReachedError: If the store tier is full
            DatabaseError: If an insert fails
        """
        logger.info("creating_product", name=data.name, variants=len(data.variants))

        store_id = self.store_id
        self.check_product_limit()

        try:
            result = (
                self.db.table(self.table)
                .insert(self._product_row(data, store_id))
                .execute()
            )
            product = ProductResponse(**result.data[0])
        except Exception as e:
            logger.error(
                "create_product_failed",
                name=data.name,
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

        variants_created = 0
        if data.has_variants and data.variants:
            try:
                variants_created = self._insert_variants(product.id, data)
            except DatabaseError:
                # No product may be left behind without its variants
                self._delete_product(product.id, store_id)
                raise

        logger.info(
            "product_created",
            product_id=product.id,
            name=product.name,
            variants_created=variants_created
        )

        return ProductCreateResult(product=product, variants_created=variants_created)

    def create_from_import(self, record: Any) -> ProductCreateResult:
        """Create a product from an import record or an already validated ProductCreate."""
        data = record if isinstance(record, ProductCreate) else ProductCreate.from_record(record)
        return self.create(data)

    # ===================
    # UTILITY METHODS
    # ===================

    def check_product_limit(self) -> None:
        """
        Raise if the store already holds its tier's maximum.

        Raises:
            ProductLimitReachedError: If count >= MAX_PRODUCTS
        """
        if not self.settings.has_product_limit:
            return
        limit = self.settings.max_products
        current = self.count()
        if current >= limit:
            logger.warning(
                "product_limit_reached",
                current=current,
                limit=limit,
                tier=self.settings.payment_tier
            )
            raise ProductLimitReachedError(limit, self.settings.payment_tier)

    def _product_row(self, data: ProductCreate, store_id: str) -> dict:
        return {
            "store_id": store_id,
            "name": data.name,
            "slug": generate_slug(data.name),
            "description": data.description,
            "price": data.price,
            "images": [
                {"url": url, "alt": data.name, "position": position}
                for position, url in enumerate(data.images)
            ],
            "category": data.category,
            "status": data.status.value,
            "is_digital": data.is_digital,
            "track_inventory": data.track_inventory,
            "inventory_count": data.inventory_count,
            "has_variants": data.has_variants,
            "variant_options": data.variant_options,
        }

    def _insert_variants(self, product_id: str, data: ProductCreate) -> int:
        rows = [
            {
                "product_id": product_id,
                "name": variant.name,
                "sku": variant.sku,
                "price_adjustment": variant.price_adjustment,
                "compare_at_price": variant.compare_at_price,
                "inventory_count": variant.inventory_count,
                "track_inventory": variant.track_inventory,
                "options": variant.options,
                "position": position,
                "is_active": variant.is_active,
            }
            for position, variant in enumerate(data.variants)
        ]

        try:
            result = self.db.table(self.variants_table).insert(rows).execute()
        except Exception as e:
            logger.error(
                "create_variants_failed",
                product_id=product_id,
                count=len(rows),
                error=str(e)
            )
            raise DatabaseError("insert", str(e), details={"product_id": product_id})

        return len(result.data)

    def _delete_product(self, product_id: str, store_id: str) -> None:
        try:
            (
                self.db.table(self.table)
                .delete()
                .eq("id", product_id)
                .eq("store_id", store_id)
                .execute()
            )
            logger.info("product_rolled_back", product_id=product_id)
        except Exception as e:
            logger.error("rollback_product_failed", product_id=product_id, error=str(e))


# Singleton instance for convenience
_product_service: Optional[ProductService] = None

def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service
