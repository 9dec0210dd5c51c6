from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String, Text

from inventory_api.core.constants import DEFAULT_REORDER_LEVEL
from inventory_api.database.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(100), unique=True)
    category = Column(String(100))
    description = Column(Text)

    price = Column(Numeric(10, 2), nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    reorder_level = Column(Integer, default=DEFAULT_REORDER_LEVEL)
    supplier = Column(String(255))

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_products_category", "category"),
        Index("idx_products_stock", "stock"),
    )


__all__ = ["Product"]
