from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from inventory_api.core.constants import MAX_DB_INT


class SaleCreate(BaseModel):
    product_id: int = Field(gt=0, le=MAX_DB_INT)
    quantity_sold: int = Field(gt=0, le=MAX_DB_INT)
    sale_price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    sale_date: Optional[date] = None
    customer_name: Optional[str] = Field(default=None, max_length=255)
    customer_email: Optional[str] = Field(default=None, max_length=255)
    payment_method: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = None


class SaleRead(BaseModel):
    id: int
    product_id: int
    quantity_sold: int
    sale_price: Decimal
    total_amount: Decimal
    sale_date: date
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SaleWithProduct(SaleRead):
    product_name: str
    category: Optional[str] = None


class DailySalesStats(BaseModel):
    date: date
    total_sales: int
    revenue: Decimal
    avg_sale_value: Decimal
