from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from inventory_api.core.constants import DEFAULT_REORDER_LEVEL, MAX_DB_INT


class ProductBase(BaseModel):
    sku: Optional[str] = Field(default=None, max_length=100)
    category: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    supplier: Optional[str] = Field(default=None, max_length=255)


class ProductCreate(ProductBase):
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0, le=MAX_DB_INT)
    reorder_level: int = Field(default=DEFAULT_REORDER_LEVEL, ge=0, le=MAX_DB_INT)


class ProductUpdate(ProductBase):
    """Partial update; only fields present in the request body are applied."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(default=None, ge=0, le=MAX_DB_INT)
    reorder_level: Optional[int] = Field(default=None, ge=0, le=MAX_DB_INT)

    @field_validator("name", "price", "stock", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class ProductRead(ProductBase):
    id: int
    name: str
    price: Decimal
    stock: int
    reorder_level: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategoryStats(BaseModel):
    category: Optional[str]
    total_products: int
    total_stock: int
    avg_price: Optional[Decimal]
