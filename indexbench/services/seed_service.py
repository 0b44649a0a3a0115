from sqlalchemy.orm import Session
from typing import List, Optional
import logging
import random
import uuid

from indexbench.models.product import Product
from indexbench.repositories.product_repository import ProductRepository
from indexbench.schemas.product import ProductCreate

logger = logging.getLogger(__name__)

CATEGORY_COUNT = 100
BASE_PRICE = 10.0


def generate_products(count: int) -> List[ProductCreate]:
    """Generate products with unique names and random serial numbers"""
    products = []
    for i in range(count):
        unique_name_part = str(uuid.uuid4())[:8]
        products.append(ProductCreate(
            product_name=f"Product {unique_name_part}_{i}",
            serial_number=str(uuid.uuid4()),
            category=f"Category {i % CATEGORY_COUNT}",
            price=BASE_PRICE + i,
        ))
    return products


class SeedService:
    """Fills the products table and samples a lookup target from it"""

    def __init__(self, db: Session, rng: Optional[random.Random] = None):
        self.db = db
        self.repository = ProductRepository(db)
        self.rng = rng or random.Random()

    def seed(self, count: int, batch_size: int = 1000) -> int:
        logger.info(f"Generating {count} test products in {self.repository.dialect}...")
        products = (
            Product.create(p.product_name, p.serial_number, p.category, p.price)
            for p in generate_products(count)
        )
        saved = self.repository.save_all(products, batch_size=batch_size)
        logger.info(f"Created {saved} products. Total records: {self.repository.count()}")
        return saved

    def pick_random_product(self) -> Optional[Product]:
        """Pick one stored product at random, or None if the table is empty"""
        total_products = self.repository.count()
        if total_products == 0:
            logger.error("No products in the database, cannot pick a random product")
            return None

        random_index = self.rng.randrange(total_products)
        logger.debug(f"Total products: {total_products}. Random index: {random_index}")

        page = self.repository.find_page(random_index, 1)
        if not page:
            logger.error(f"Random product selection failed (index: {random_index}). Page is empty")
            return None

        product = page[0]
        logger.info(f"Randomly selected product - Name: '{product.product_name}', Serial: '{product.serial_number}'")

        if self.repository.find_by_serial_number(product.serial_number) is not None:
            logger.info(f"Confirmed serial_number '{product.serial_number}' in the database")
        else:
            logger.error(f"serial_number '{product.serial_number}' not found in the database")
        return product
