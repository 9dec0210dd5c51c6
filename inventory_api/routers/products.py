from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from inventory_api.core.constants import MAX_DB_INT, Role
from inventory_api.dependencies import get_db, require_auth, require_role
from inventory_api.schemas.product import CategoryStats, ProductCreate, ProductRead, ProductUpdate
from inventory_api.services import product_service

router = APIRouter(prefix="/products", tags=["Products"], dependencies=[Depends(require_auth)])


@router.get("", response_model=list[ProductRead])
def list_products(db: Session = Depends(get_db)):
    return product_service.list_products(db)


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return product_service.create_product(db, payload)


@router.get("/alerts/low-stock", response_model=list[ProductRead])
def low_stock(db: Session = Depends(get_db)):
    return product_service.list_low_stock(db)


@router.get("/stats/by-category", response_model=list[CategoryStats])
def stats_by_category(db: Session = Depends(get_db)):
    return product_service.category_stats(db)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int = Path(gt=0, le=MAX_DB_INT), db: Session = Depends(get_db)):
    return product_service.get_product(db, product_id)


@router.put("/{product_id}", response_model=ProductRead)
def update_product(
    payload: ProductUpdate,
    product_id: int = Path(gt=0, le=MAX_DB_INT),
    db: Session = Depends(get_db),
):
    return product_service.update_product(db, product_id, payload)


@router.delete("/{product_id}")
def delete_product(
    product_id: int = Path(gt=0, le=MAX_DB_INT),
    db: Session = Depends(get_db),
    _owner=Depends(require_role(Role.OWNER)),
):
    product_service.delete_product(db, product_id)
    return {"message": "Product deleted successfully"}
