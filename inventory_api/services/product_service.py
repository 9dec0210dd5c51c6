from decimal import ROUND_HALF_UP, Decimal
from typing import cast

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from inventory_api.core.dates import utcnow
from inventory_api.core.errors import NotFoundError
from inventory_api.models.product import Product
from inventory_api.schemas.product import ProductCreate, ProductUpdate

_CENTS = Decimal("0.01")


def to_money(value) -> Decimal | None:
    if value is None:
        return None
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def list_products(db: Session) -> list[Product]:
    products = (
        db.execute(select(Product).order_by(Product.created_at.desc(), Product.id.desc()))
        .scalars()
        .all()
    )
    return cast(list[Product], list(products))


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found", details={"product_id": product_id})
    return product


def create_product(db: Session, payload: ProductCreate) -> Product:
    product = Product(**payload.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def update_product(db: Session, product_id: int, payload: ProductUpdate) -> Product:
    product = get_product(db, product_id)
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(product, field, value)
    product.updated_at = utcnow()
    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: int) -> None:
    product = get_product(db, product_id)
    db.delete(product)
    db.commit()


def list_low_stock(db: Session) -> list[Product]:
    products = (
        db.execute(
            select(Product)
            .where(Product.stock <= Product.reorder_level)
            .order_by(Product.stock.asc(), Product.id.asc())
        )
        .scalars()
        .all()
    )
    return cast(list[Product], list(products))


def category_stats(db: Session) -> list[dict]:
    total_products = func.count(Product.id).label("total_products")
    rows = db.execute(
        select(
            Product.category,
            total_products,
            func.coalesce(func.sum(Product.stock), 0).label("total_stock"),
            func.avg(Product.price).label("avg_price"),
        )
        .group_by(Product.category)
        .order_by(total_products.desc(), Product.category)
    ).mappings()
    return [
        {
            "category": row["category"],
            "total_products": int(row["total_products"]),
            "total_stock": int(row["total_stock"] or 0),
            "avg_price": to_money(row["avg_price"]),
        }
        for row in rows
    ]
