from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text

from inventory_api.database.base import Base


class Sales(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True)
    product_id = Column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )

    quantity_sold = Column(Integer, nullable=False)
    sale_price = Column(Numeric(10, 2), nullable=False)
    # quantity_sold * sale_price at creation; never recomputed
    total_amount = Column(Numeric(10, 2), nullable=False)
    sale_date = Column(Date, nullable=False)

    customer_name = Column(String(255))
    customer_email = Column(String(255))
    payment_method = Column(String(50))
    notes = Column(Text)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))

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
        Index("idx_sales_product", "product_id"),
        Index("idx_sales_sale_date", "sale_date"),
        Index("idx_sales_created_at", "created_at"),
    )


__all__ = ["Sales"]
