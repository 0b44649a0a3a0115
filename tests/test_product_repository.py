"""Tests for ProductRepository on SQLite.

These tests verify:
- Saving single products and batches
- Lookups by serial number and by product name
- Unique serial number enforced by the database
- Paging and deletion
- Query plans for indexed and non-indexed lookups
"""

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, MultipleResultsFound

from indexbench.db.database import session_factory
from indexbench.models import Product
from indexbench.repositories import ProductRepository


def make_product(i, serial=None, name=None):
    return Product.create(
        name or f"Product {i}",
        serial or f"SN-{i:05d}",
        f"Category {i % 100}",
        10.0 + i,
    )


class TestProductRepository:
    """Test CRUD operations on the products table."""

    @pytest.fixture
    def repository(self, db):
        return ProductRepository(db)

    @pytest.fixture
    def seeded(self, repository):
        repository.save_all((make_product(i) for i in range(50)), batch_size=7)
        return repository

    def test_schema_has_unique_serial_index(self, engine):
        indexes = {ix["name"]: ix for ix in inspect(engine).get_indexes("products")}

        assert "idx_serial_number" in indexes
        assert indexes["idx_serial_number"]["column_names"] == ["serial_number"]
        assert indexes["idx_serial_number"]["unique"]
        # product_name must stay unindexed
        assert not any("product_name" in ix["column_names"] for ix in indexes.values())

    def test_save_assigns_identity(self, repository):
        product = repository.save(make_product(1))

        assert product.id is not None
        assert repository.count() == 1

    def test_save_commits(self, engine, repository):
        product = repository.save(make_product(1))

        other = session_factory(engine)()
        try:
            assert other.get(Product, product.id) is not None
        finally:
            other.close()

    def test_save_all_returns_saved_count(self, seeded):
        assert seeded.count() == 50

    def test_save_all_rejects_non_positive_batch_size(self, repository):
        with pytest.raises(ValueError):
            repository.save_all([make_product(1)], batch_size=0)

    def test_find_by_serial_number(self, seeded):
        product = seeded.find_by_serial_number("SN-00042")

        assert product is not None
        assert product.product_name == "Product 42"
        assert product.category == "Category 42"
        assert product.price == 52.0

    def test_find_by_product_name(self, seeded):
        product = seeded.find_by_product_name("Product 7")

        assert product is not None
        assert product.serial_number == "SN-00007"

    def test_lookups_return_none_when_missing(self, seeded):
        assert seeded.find_by_serial_number("missing") is None
        assert seeded.find_by_product_name("missing") is None

    def test_find_by_dispatches_on_column(self, seeded):
        assert seeded.find_by("serial_number", "SN-00003").product_name == "Product 3"
        assert seeded.find_by("product_name", "Product 3").serial_number == "SN-00003"

    def test_find_by_unknown_column(self, seeded):
        with pytest.raises(ValueError, match="Unknown lookup column"):
            seeded.find_by("category", "Category 1")

    def test_find_by_id(self, repository):
        product = repository.save(make_product(5))

        assert repository.find_by_id(product.id).serial_number == "SN-00005"
        assert repository.find_by_id(product.id + 1000) is None

    def test_duplicate_serial_number_raises_integrity_error(self, repository):
        repository.save(make_product(1, serial="SN-DUP"))

        with pytest.raises(IntegrityError):
            repository.save(make_product(2, serial="SN-DUP"))

        # Session is usable again after the rollback
        assert repository.count() == 1

    def test_save_all_rolls_back_whole_batch_on_duplicate(self, repository):
        products = [make_product(1, serial="SN-A"), make_product(2, serial="SN-B"), make_product(3, serial="SN-A")]

        with pytest.raises(IntegrityError):
            repository.save_all(products, batch_size=10)

        assert repository.count() == 0

    def test_duplicate_product_names_are_allowed(self, repository):
        repository.save(make_product(1, name="Same name"))
        repository.save(make_product(2, name="Same name"))

        assert repository.count() == 2
        with pytest.raises(MultipleResultsFound):
            repository.find_by_product_name("Same name")

    def test_find_page_orders_by_id(self, seeded):
        first = seeded.find_page(0)[0]
        tenth = seeded.find_page(9)[0]

        assert first.serial_number == "SN-00000"
        assert tenth.serial_number == "SN-00009"
        assert len(seeded.find_page(1, page_size=20)) == 20
        assert seeded.find_page(50) == []

    def test_find_page_rejects_invalid_arguments(self, seeded):
        with pytest.raises(ValueError):
            seeded.find_page(-1)
        with pytest.raises(ValueError):
            seeded.find_page(0, page_size=0)

    def test_delete_all(self, seeded):
        assert seeded.delete_all() == 50
        assert seeded.count() == 0

    def test_serial_number_lookup_uses_index(self, seeded):
        plan = " ".join(seeded.explain_lookup("serial_number", "SN-00001"))

        assert "idx_serial_number" in plan

    def test_product_name_lookup_scans_table(self, seeded):
        plan = " ".join(seeded.explain_lookup("product_name", "Product 1"))

        assert "SCAN" in plan
        assert "idx_serial_number" not in plan

    def test_explain_rejects_unknown_column(self, seeded):
        with pytest.raises(ValueError):
            seeded.explain_lookup("price; DROP TABLE products", "x")
