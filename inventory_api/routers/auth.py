from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from inventory_api.core.security import Identity
from inventory_api.dependencies import get_db, rate_limit_auth, require_auth
from inventory_api.schemas.auth import TokenResponse, UserLogin, UserRead, UserRegister
from inventory_api.services.auth_service import (
    authenticate_user,
    get_user,
    issue_token,
    register_user,
)

router = APIRouter(prefix="/auth", tags=["Auth"], dependencies=[Depends(rate_limit_auth)])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    user = register_user(db, payload)
    return TokenResponse(token=issue_token(user), user=UserRead.model_validate(user))


@router.post("/login", response_model=TokenResponse)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    user = authenticate_user(db, payload)
    return TokenResponse(token=issue_token(user), user=UserRead.model_validate(user))


@router.get("/me", response_model=UserRead)
def me(identity: Identity = Depends(require_auth), db: Session = Depends(get_db)):
    return get_user(db, identity.user_id)
