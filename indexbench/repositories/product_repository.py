from sqlalchemy import text
from sqlalchemy.orm import Session
from typing import Iterable, List, Optional
import logging

from indexbench.models.product import Product

logger = logging.getLogger(__name__)

# column name -> whether the database carries an index on it
LOOKUP_COLUMNS = {
    "product_name": False,
    "serial_number": True,
}


class ProductRepository:
    """Data access for the products table"""

    def __init__(self, db: Session):
        self.db = db

    @property
    def dialect(self) -> str:
        return self.db.get_bind().dialect.name

    def save(self, product: Product) -> Product:
        """Persist one product and return it with its id assigned"""
        try:
            self.db.add(product)
            self.db.flush()
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save product {product.serial_number!r}: {e}")
            raise
        self.db.refresh(product)
        return product

    def save_all(self, products: Iterable[Product], batch_size: int = 1000) -> int:
        """Persist products in flushed batches inside one transaction"""
        if batch_size < 1:
            raise ValueError("batch_size must be positive")

        saved = 0
        batch = []
        try:
            for product in products:
                batch.append(product)
                if len(batch) >= batch_size:
                    saved += self._flush_batch(batch)
                    batch = []
            if batch:
                saved += self._flush_batch(batch)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save products after {saved} rows: {e}")
            raise
        return saved

    def _flush_batch(self, batch: List[Product]) -> int:
        self.db.add_all(batch)
        self.db.flush()
        # Keep the identity map small while seeding
        for product in batch:
            self.db.expunge(product)
        logger.debug(f"Flushed batch of {len(batch)} products")
        return len(batch)

    def flush(self) -> None:
        self.db.flush()

    def count(self) -> int:
        return self.db.query(Product).count()

    def find_page(self, page_index: int, page_size: int = 1) -> List[Product]:
        """Return one page of products ordered by id"""
        if page_index < 0 or page_size < 1:
            raise ValueError("page_index must be >= 0 and page_size >= 1")
        return (
            self.db.query(Product)
            .order_by(Product.id)
            .offset(page_index * page_size)
            .limit(page_size)
            .all()
        )

    def find_by_id(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def find_by_product_name(self, product_name: str) -> Optional[Product]:
        # one_or_none fetches every match, so the scan is never cut short by a LIMIT
        return self.db.query(Product).filter(Product.product_name == product_name).one_or_none()

    def find_by_serial_number(self, serial_number: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.serial_number == serial_number).one_or_none()

    def find_by(self, column: str, value: str) -> Optional[Product]:
        """Dispatch to the lookup for the named column"""
        _check_column(column)
        if column == "serial_number":
            return self.find_by_serial_number(value)
        return self.find_by_product_name(value)

    def delete_all(self) -> int:
        try:
            deleted = self.db.query(Product).delete(synchronize_session=False)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete products: {e}")
            raise
        logger.info(f"Deleted {deleted} products")
        return deleted

    def explain_lookup(self, column: str, value: str) -> List[str]:
        """Return the database query plan for a lookup on the given column"""
        _check_column(column)
        dialect = self.dialect
        # column is checked against LOOKUP_COLUMNS above
        query = f"SELECT * FROM {Product.__tablename__} WHERE {column} = :value"

        if dialect == "sqlite":
            rows = self.db.execute(text(f"EXPLAIN QUERY PLAN {query}"), {"value": value}).fetchall()
            return [row[-1] for row in rows]
        if dialect == "postgresql":
            rows = self.db.execute(text(f"EXPLAIN {query}"), {"value": value}).fetchall()
            return [row[0] for row in rows]
        raise ValueError(f"Query plans are not supported for dialect '{dialect}'")


def _check_column(column: str) -> None:
    if column not in LOOKUP_COLUMNS:
        raise ValueError(f"Unknown lookup column '{column}'. Expected one of: {', '.join(LOOKUP_COLUMNS)}")
