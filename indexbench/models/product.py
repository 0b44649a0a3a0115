from sqlalchemy import BigInteger, Column, Float, Index, Integer, Text
from indexbench.db.database import Base


class Product(Base):
    __tablename__ = "products"

    # SQLite only autoincrements INTEGER PRIMARY KEY
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    product_name = Column(Text, nullable=False)  # not indexed, compared against serial_number
    serial_number = Column(Text, nullable=False)
    category = Column(Text)
    price = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        Index("idx_serial_number", "serial_number", unique=True),
    )

    @classmethod
    def create(cls, product_name: str, serial_number: str, category: str, price: float) -> "Product":
        """Build an unsaved product; the database assigns the id"""
        return cls(
            product_name=product_name,
            serial_number=serial_number,
            category=category,
            price=price,
        )

    def __repr__(self) -> str:
        return f"<Product id={self.id} serial_number={self.serial_number!r}>"
