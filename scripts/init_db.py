import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from inventory_api.config import get_settings
from inventory_api.core.constants import Role
from inventory_api.core.logging import setup_logging
from inventory_api.core.security import hash_password
from inventory_api.database import create_schema, session_scope
from inventory_api.models.product import Product
from inventory_api.models.user import User

logger = logging.getLogger("init_db")

SAMPLE_PRODUCTS = (
    dict(name="Laptop", sku="LAP-001", category="Electronics", price=Decimal("900.00"), stock=12),
    dict(name="Mouse", sku="MOU-001", category="Accessories", price=Decimal("20.00"), stock=50),
    dict(name="Keyboard", sku="KEY-001", category="Accessories", price=Decimal("45.00"), stock=30),
    dict(name="USB-C Hub", sku="HUB-001", category="Accessories", price=Decimal("35.00"), stock=4),
)


def parse_args():
    parser = argparse.ArgumentParser(description="Create tables and the bootstrap owner account.")
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Insert sample products when the products table is empty.",
    )
    return parser.parse_args()


def ensure_owner(db) -> None:
    settings = get_settings()
    user_count = db.execute(select(func.count(User.id))).scalar_one()
    if user_count:
        logger.info("Users already exist, skipping owner bootstrap.")
        return
    if not settings.DEFAULT_ADMIN_PASSWORD:
        logger.warning(
            "No users exist and DEFAULT_ADMIN_PASSWORD is not set; no owner account created."
        )
        return
    db.add(
        User(
            username=settings.DEFAULT_ADMIN_USERNAME,
            email=settings.DEFAULT_ADMIN_EMAIL.strip().lower(),
            password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
            role=Role.OWNER,
        )
    )
    logger.info("Created owner account %s", settings.DEFAULT_ADMIN_EMAIL)


def seed_products(db) -> None:
    if db.execute(select(Product.id).limit(1)).first():
        logger.info("Seed skipped: products already exist.")
        return
    db.add_all(Product(**values) for values in SAMPLE_PRODUCTS)
    logger.info("Seeded %s sample products", len(SAMPLE_PRODUCTS))


def main():
    setup_logging()
    args = parse_args()
    try:
        create_schema()
        with session_scope() as db:
            ensure_owner(db)
            if args.seed:
                seed_products(db)
    except SQLAlchemyError as exc:
        raise SystemExit(f"Database initialization failed: {exc}") from exc


if __name__ == "__main__":
    main()
