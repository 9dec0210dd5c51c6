from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from inventory_api.core.security import Identity
from inventory_api.dependencies import get_db, require_auth
from inventory_api.schemas.sales import DailySalesStats, SaleCreate, SaleRead, SaleWithProduct
from inventory_api.services import sales_service

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.post("", response_model=SaleRead, status_code=status.HTTP_201_CREATED)
def create_sale(
    payload: SaleCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_auth),
):
    return sales_service.record_sale(db, payload, acting_user_id=identity.user_id)


@router.get("", response_model=list[SaleWithProduct])
def list_sales(db: Session = Depends(get_db), _auth=Depends(require_auth)):
    return sales_service.list_sales(db)


@router.get("/stats", response_model=list[DailySalesStats])
def sales_stats(db: Session = Depends(get_db), _auth=Depends(require_auth)):
    return sales_service.daily_stats(db)
