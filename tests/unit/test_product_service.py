"""
Unit tests for ProductService.

Run: pytest tests/unit/test_product_service.py -v
Run with coverage: pytest tests/unit/test_product_service.py --cov=services/product_service
"""

import pytest

# Import what we're testing
from services.product_service import ProductService, get_product_service
from models.product import ProductCreate, ProductStatus, VariantCreate
from exceptions import (
    DatabaseError,
    ProductLimitReachedError,
    ProductNotFoundError,
    StoreNotConfiguredError,
)

# Import test utilities
from tests.factories import ProductRecordFactory


class TestProductServiceGetAll:
    """Tests for ProductService.get_all()"""

    def test_get_all_returns_products(self, mock_db, mock_supabase, sample_product_row, test_settings):
        """Should return list of products with total count."""
        # Arrange
        mock_supabase.set_table_data("products", [sample_product_row], count=1)
        service = ProductService(test_settings)

        # Act
        products, total = service.get_all()

        # Assert
        assert len(products) == 1
        assert total == 1
        assert products[0].name == "Classic Tee"
        assert products[0].images[0].url == "https://cdn.example.com/tee.jpg"

    def test_get_all_scoped_to_store(self, mock_db, mock_supabase, sample_product_row, test_settings):
        """Should not return another store's products."""
        # Arrange
        other = {**sample_product_row, "id": "other-1", "store_id": "store-other"}
        mock_supabase.set_table_data("products", [sample_product_row, other])
        service = ProductService(test_settings)

        # Act
        products, total = service.get_all()

        # Assert
        assert [p.id for p in products] == ["test-uuid-123"]
        assert total == 1

    def test_get_all_with_status_filter(self, mock_db, mock_supabase, sample_product_row, test_settings):
        """Should filter by status."""
        draft = {**sample_product_row, "id": "draft-1", "status": "draft"}
        mock_supabase.set_table_data("products", [sample_product_row, draft])
        service = ProductService(test_settings)

        products, _ = service.get_all(status=ProductStatus.DRAFT)

        assert [p.id for p in products] == ["draft-1"]

    def test_get_all_database_error(self, mock_db, mock_supabase, test_settings):
        """Should wrap client failures in DatabaseError."""
        mock_supabase.fail_table("products", RuntimeError("connection reset"))
        service = ProductService(test_settings)

        with pytest.raises(DatabaseError):
            service.get_all()


class TestProductServiceGetById:
    """Tests for ProductService.get_by_id()"""

    def test_get_by_id_returns_product(self, mock_db, mock_supabase, sample_product_row, test_settings):
        """Should return the matching product."""
        mock_supabase.set_table_data("products", [sample_product_row])
        service = ProductService(test_settings)

        product = service.get_by_id("test-uuid-123")

        assert product.slug == "classic-tee"

    def test_get_by_id_not_found(self, mock_db, mock_supabase, test_settings):
        """Should raise ProductNotFoundError for unknown ID."""
        mock_supabase.set_table_data("products", [])
        service = ProductService(test_settings)

        with pytest.raises(ProductNotFoundError):
            service.get_by_id("missing")


class TestProductServiceCreate:
    """Tests for ProductService.create()"""

    def test_create_simple_product(self, mock_db, mock_supabase, test_settings):
        """Should insert one product row scoped to the store."""
        # Arrange
        service = ProductService(test_settings)
        data = ProductCreate(
            name="Café Crème Mug",
            price=1500,
            images=["https://cdn.example.com/mug.jpg", "  "],
            track_inventory=True,
            inventory_count=8,
        )

        # Act
        result = service.create(data)

        # Assert
        assert result.variants_created == 0
        assert result.product.name == "Café Crème Mug"

        row = mock_supabase.inserted["products"][0]
        assert row["store_id"] == "store-test-1"
        assert row["slug"] == "cafe-creme-mug"
        assert row["images"] == [
            {"url": "https://cdn.example.com/mug.jpg", "alt": "Café Crème Mug", "position": 0}
        ]
        assert row["inventory_count"] == 8
        assert mock_supabase.inserted.get("product_variants", []) == []

    def test_create_with_variants(self, mock_db, mock_supabase, test_settings):
        """Should write each variant with its position."""
        # Arrange
        service = ProductService(test_settings)
        data = ProductCreate(
            name="Tee",
            price=2000,
            has_variants=True,
            variant_options=["Size"],
            inventory_count=10,
            variants=[
                VariantCreate(name="S", options={"Size": "S"}, inventory_count=3),
                VariantCreate(name="M", options={"Size": "M"}, price_adjustment=200),
            ],
        )

        # Act
        result = service.create(data)

        # Assert
        assert result.variants_created == 2
        product_row = mock_supabase.inserted["products"][0]
        assert product_row["track_inventory"] is False
        assert product_row["inventory_count"] is None

        variant_rows = mock_supabase.inserted["product_variants"]
        assert [v["position"] for v in variant_rows] == [0, 1]
        assert [v["name"] for v in variant_rows] == ["S", "M"]
        assert variant_rows[1]["price_adjustment"] == 200
        assert all(v["product_id"] == result.product.id for v in variant_rows)

    def test_create_at_limit(self, mock_db, mock_supabase, test_settings):
        """Should refuse once the tier limit is reached."""
        # Arrange
        mock_supabase.set_table_data("products", [], count=10)
        settings = test_settings.model_copy(update={"max_products": 10, "payment_tier": "starter"})
        service = ProductService(settings)

        # Act & Assert
        with pytest.raises(ProductLimitReachedError) as exc:
            service.create(ProductCreate(name="One too many"))

        assert exc.value.status_code == 403
        assert exc.value.details == {"limit": 10, "tier": "starter"}
        assert mock_supabase.inserted["products"] == []

    def test_create_below_limit(self, mock_db, mock_supabase, test_settings):
        """Should create while under the limit."""
        mock_supabase.set_table_data("products", [], count=9)
        settings = test_settings.model_copy(update={"max_products": 10})
        service = ProductService(settings)

        result = service.create(ProductCreate(name="Last slot"))

        assert result.product.name == "Last slot"

    def test_create_insert_failure(self, mock_db, mock_supabase, test_settings):
        """Should raise DatabaseError when the insert fails."""
        mock_supabase.fail_table("products", RuntimeError("duplicate key"))
        service = ProductService(test_settings)

        with pytest.raises(DatabaseError) as exc:
            service.create(ProductCreate(name="Broken"))

        assert "duplicate key" in exc.value.message

    def test_variant_failure_removes_product(self, mock_db, mock_supabase, test_settings):
        """Should delete the product row again when its variants cannot be written."""
        # Arrange
        mock_supabase.fail_table("product_variants", RuntimeError("variant sku taken"))
        service = ProductService(test_settings)
        data = ProductCreate(
            name="Tee",
            price=2000,
            has_variants=True,
            variant_options=["Size"],
            variants=[VariantCreate(name="S", options={"Size": "S"})],
        )

        # Act
        with pytest.raises(DatabaseError) as exc:
            service.create(data)

        # Assert
        assert "variant sku taken" in exc.value.message
        product_id = mock_supabase.inserted["products"][0]["id"]
        assert mock_supabase.deleted["products"] == [
            {"id": product_id, "store_id": "store-test-1"}
        ]

    def test_create_without_store(self, mock_db, test_settings):
        """Should refuse to write without a store id."""
        settings = test_settings.model_copy(update={"store_id": ""})
        service = ProductService(settings)

        with pytest.raises(StoreNotConfiguredError):
            service.create(ProductCreate(name="Nowhere"))


class TestProductServiceCreateFromImport:
    """Tests for ProductService.create_from_import()"""

    def test_from_standard_record(self, mock_db, mock_supabase, test_settings):
        """Parser records are converted before insert."""
        service = ProductService(test_settings)
        record = ProductRecordFactory.create(name="Widget", price=1999, inventory_count=4)

        result = service.create_from_import(record)

        assert result.product.price == 1999
        assert mock_supabase.inserted["products"][0]["inventory_count"] == 4

    def test_from_platform_record(self, mock_db, mock_supabase, test_settings):
        """Variants of a platform record are written too."""
        service = ProductService(test_settings)
        record = ProductRecordFactory.create_with_variants(["S", "M", "L"], name="Hoodie")

        result = service.create_from_import(record)

        assert result.variants_created == 3
        assert mock_supabase.inserted["products"][0]["variant_options"] == ["Size"]

    def test_digital_record_drops_stock(self, mock_db, mock_supabase, test_settings):
        """Digital products are stored without stock tracking."""
        service = ProductService(test_settings)
        record = ProductRecordFactory.create(is_digital=True, inventory_count=50)

        service.create_from_import(record)

        row = mock_supabase.inserted["products"][0]
        assert row["is_digital"] is True
        assert row["track_inventory"] is False
        assert row["inventory_count"] is None


class TestGetProductService:
    """Tests for the singleton accessor."""

    def test_returns_same_instance(self, mock_db):
        import services.product_service as module
        module._product_service = None

        first = get_product_service()
        second = get_product_service()

        assert first is second
        module._product_service = None
