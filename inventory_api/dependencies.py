from typing import Optional

from fastapi import Header, Request

from inventory_api.config import get_settings
from inventory_api.core.constants import Role
from inventory_api.core.errors import RateLimitError
from inventory_api.core.ratelimit import SlidingWindowLimiter, api_limiter, auth_limiter
from inventory_api.core.security import Identity, authenticate_request, authorize
from inventory_api.database.session import get_db


def require_auth(authorization: Optional[str] = Header(None)) -> Identity:
    return authenticate_request(authorization)


def require_role(*roles: Role):
    def _dependency(authorization: Optional[str] = Header(None)) -> Identity:
        identity = authenticate_request(authorization)
        return authorize(identity, *roles)

    return _dependency


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _enforce(limiter: SlidingWindowLimiter, request: Request, limit: int, message: str) -> None:
    settings = get_settings()
    if not settings.RATE_LIMIT_ENABLED:
        return
    retry_after = limiter.hit(_client_key(request), limit, settings.RATE_LIMIT_WINDOW_SECONDS)
    if retry_after is not None:
        raise RateLimitError(message, retry_after=retry_after)


def rate_limit_api(request: Request) -> None:
    _enforce(
        api_limiter,
        request,
        get_settings().RATE_LIMIT_API_REQUESTS,
        "Too many requests from this IP, please try again later.",
    )


def rate_limit_auth(request: Request) -> None:
    _enforce(
        auth_limiter,
        request,
        get_settings().RATE_LIMIT_AUTH_REQUESTS,
        "Too many login attempts, please try again later.",
    )


__all__ = ["get_db", "rate_limit_api", "rate_limit_auth", "require_auth", "require_role"]
