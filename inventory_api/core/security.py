from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import jwt

from inventory_api.config import get_settings
from inventory_api.core.constants import Role
from inventory_api.core.dates import utcnow
from inventory_api.core.errors import AuthenticationError, AuthorizationError

_HASH_SCHEME = "pbkdf2_sha256"


@dataclass(frozen=True)
class Identity:
    user_id: int
    username: str
    role: Role


def _hash_password(password: str, salt: str, rounds: int) -> str:
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        rounds,
    )
    return digest.hex()


def hash_password(password: str, *, rounds: Optional[int] = None) -> str:
    if rounds is None:
        rounds = get_settings().PASSWORD_PBKDF2_ROUNDS
    salt = secrets.token_hex(16)
    return f"{_HASH_SCHEME}${rounds}${salt}${_hash_password(password, salt, rounds)}"


def verify_password(password: str, stored: str) -> bool:
    try:
        scheme, rounds_text, salt, expected = stored.split("$", 3)
        rounds = int(rounds_text)
    except (AttributeError, ValueError):
        return False
    if scheme != _HASH_SCHEME:
        return False
    computed = _hash_password(password, salt, rounds)
    return hmac.compare_digest(computed, expected)


def get_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _require_secret() -> str:
    settings = get_settings()
    if not settings.JWT_SECRET:
        raise AuthenticationError("JWT auth is not configured")
    return settings.JWT_SECRET


def create_access_token(user_id: int, username: str, role: Role | str) -> str:
    settings = get_settings()
    secret = _require_secret()
    issued_at = utcnow()
    claims = {
        "sub": str(user_id),
        "username": username,
        "role": Role(role).value,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.JWT_EXPIRES_MINUTES),
    }
    if settings.JWT_ISSUER:
        claims["iss"] = settings.JWT_ISSUER
    if settings.JWT_AUDIENCE:
        claims["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(claims, secret, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Identity:
    settings = get_settings()
    secret = _require_secret()
    options = {"verify_aud": bool(settings.JWT_AUDIENCE), "require": ["exp", "sub"]}
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options=options,
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError(
            "Token has expired. Please login again.", kind="token_expired"
        ) from exc
    except jwt.PyJWTError as exc:
        raise AuthenticationError("Invalid token.", kind="token_invalid") from exc

    try:
        return Identity(
            user_id=int(payload["sub"]),
            username=str(payload.get("username") or ""),
            role=Role(payload.get("role")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthenticationError("Invalid token.", kind="token_invalid") from exc


def authenticate_request(authorization: Optional[str]) -> Identity:
    token = get_bearer_token(authorization)
    if not token:
        raise AuthenticationError(
            "Access denied. No token provided.", kind="token_missing"
        )
    return decode_access_token(token)


def authorize(identity: Identity, *allowed: Role) -> Identity:
    if allowed and identity.role not in allowed:
        raise AuthorizationError(
            details={
                "required": [role.value for role in allowed],
                "current": identity.role.value,
            }
        )
    return identity


__all__ = [
    "Identity",
    "authenticate_request",
    "authorize",
    "create_access_token",
    "decode_access_token",
    "get_bearer_token",
    "hash_password",
    "verify_password",
]
