import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from inventory_api.config import get_settings
from inventory_api.core.constants import DEFAULT_ROLE, Role
from inventory_api.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from inventory_api.core.security import create_access_token, hash_password, verify_password
from inventory_api.models.user import User
from inventory_api.schemas.auth import UserLogin, UserRegister

logger = logging.getLogger(__name__)


def issue_token(user: User) -> str:
    return create_access_token(user.id, user.username, user.role)


def register_user(db: Session, payload: UserRegister, role: Role = DEFAULT_ROLE) -> User:
    settings = get_settings()
    if len(payload.password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long"
        )

    existing = (
        db.execute(
            select(User).where(
                or_(User.email == payload.email, User.username == payload.username)
            )
        )
        .scalars()
        .first()
    )
    if existing:
        message = (
            "Email already registered"
            if existing.email == payload.email
            else "Username already taken"
        )
        raise ConflictError(message)

    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.role.value)
    return user


def authenticate_user(db: Session, payload: UserLogin) -> User:
    user = db.execute(select(User).where(User.email == payload.email)).scalars().first()
    if user is None or not verify_password(payload.password, user.password_hash):
        raise AuthenticationError("Invalid credentials", kind="invalid_credentials")
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
