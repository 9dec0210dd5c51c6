"""
Sale ledger: records sales and keeps product stock consistent with them.

A sale and the matching stock decrement are committed together or not at
all. The product row is locked for the duration of the transaction where
the datastore supports it, and the decrement itself is guarded with
``stock >= quantity`` so that two racing sales can never overdraw stock
even on datastores that ignore row locks.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from inventory_api.config import get_settings
from inventory_api.core.concurrency import lock_for_update, run_with_retry
from inventory_api.core.constants import MAX_MONEY
from inventory_api.core.dates import as_date, today_utc, utcnow
from inventory_api.core.errors import InsufficientStockError, NotFoundError, ValidationError
from inventory_api.models.product import Product
from inventory_api.models.sales import Sales
from inventory_api.schemas.sales import SaleCreate
from inventory_api.services.product_service import to_money

logger = logging.getLogger(__name__)


def _record_sale_once(
    db: Session,
    payload: SaleCreate,
    acting_user_id: Optional[int],
) -> Sales:
    product_id = payload.product_id
    quantity = payload.quantity_sold
    sale_price = to_money(payload.sale_price)
    total_amount = to_money(sale_price * quantity)
    if total_amount > MAX_MONEY:
        raise ValidationError(
            "Sale total exceeds the supported amount",
            details={"total_amount": str(total_amount), "max": str(MAX_MONEY)},
        )

    current_stock = db.execute(
        lock_for_update(select(Product.stock).where(Product.id == product_id))
    ).scalar_one_or_none()
    if current_stock is None:
        raise NotFoundError("Product not found", details={"product_id": product_id})
    if quantity > current_stock:
        raise InsufficientStockError(
            product_id=product_id, requested=quantity, available=current_stock
        )

    sale = Sales(
        product_id=product_id,
        quantity_sold=quantity,
        sale_price=sale_price,
        total_amount=total_amount,
        sale_date=payload.sale_date or today_utc(),
        customer_name=payload.customer_name,
        customer_email=payload.customer_email,
        payment_method=payload.payment_method,
        notes=payload.notes,
        created_by=acting_user_id,
    )
    db.add(sale)
    db.flush()

    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        # another sale committed between the read and the guarded write
        available = db.execute(
            select(Product.stock).where(Product.id == product_id)
        ).scalar_one_or_none()
        if available is None:
            raise NotFoundError("Product not found", details={"product_id": product_id})
        raise InsufficientStockError(
            product_id=product_id, requested=quantity, available=available
        )

    db.commit()
    db.refresh(sale)
    return sale


def record_sale(
    db: Session,
    payload: SaleCreate,
    acting_user_id: Optional[int] = None,
) -> Sales:
    settings = get_settings()
    try:
        sale = run_with_retry(
            db,
            lambda: _record_sale_once(db, payload, acting_user_id),
            attempts=settings.SALE_RETRY_ATTEMPTS,
            backoff_base=settings.SALE_RETRY_BACKOFF_SECONDS,
            label="sale",
        )
    except InsufficientStockError as exc:
        logger.warning(
            "Sale rejected for product %s: requested %s, available %s",
            exc.product_id,
            exc.requested,
            exc.available,
        )
        raise
    logger.info(
        "Recorded sale %s: product %s x%s = %s (user %s)",
        sale.id,
        sale.product_id,
        sale.quantity_sold,
        sale.total_amount,
        acting_user_id,
    )
    return sale


def list_sales(db: Session) -> list[dict]:
    rows = db.execute(
        select(
            Sales,
            Product.name.label("product_name"),
            Product.category.label("category"),
        )
        .join(Product, Sales.product_id == Product.id)
        .order_by(Sales.created_at.desc(), Sales.id.desc())
    ).all()
    results = []
    for sale, product_name, category in rows:
        results.append(
            {
                "id": sale.id,
                "product_id": sale.product_id,
                "quantity_sold": sale.quantity_sold,
                "sale_price": sale.sale_price,
                "total_amount": sale.total_amount,
                "sale_date": sale.sale_date,
                "customer_name": sale.customer_name,
                "customer_email": sale.customer_email,
                "payment_method": sale.payment_method,
                "notes": sale.notes,
                "created_by": sale.created_by,
                "created_at": sale.created_at,
                "updated_at": sale.updated_at,
                "product_name": product_name,
                "category": category,
            }
        )
    return results


def daily_stats(db: Session, days: Optional[int] = None) -> list[dict]:
    """Count, revenue and average sale value per sale_date, newest first."""
    if days is None:
        days = get_settings().SALES_STATS_DAYS
    rows = db.execute(
        select(
            Sales.sale_date.label("date"),
            func.count(Sales.id).label("total_sales"),
            func.sum(Sales.total_amount).label("revenue"),
            func.avg(Sales.total_amount).label("avg_sale_value"),
        )
        .group_by(Sales.sale_date)
        .order_by(Sales.sale_date.desc())
        .limit(days)
    ).mappings()

    stats = []
    for row in rows:
        sale_date: Optional[date] = as_date(row["date"])
        stats.append(
            {
                "date": sale_date,
                "total_sales": int(row["total_sales"]),
                "revenue": to_money(row["revenue"] or 0),
                "avg_sale_value": to_money(row["avg_sale_value"] or 0),
            }
        )
    return stats
