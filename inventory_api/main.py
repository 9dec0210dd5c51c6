import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inventory_api.config import Settings, get_settings
from inventory_api.core.errors import register_error_handlers
from inventory_api.core.logging import log_requests, setup_logging
from inventory_api.database import create_schema, engine
from inventory_api.dependencies import rate_limit_api
from inventory_api.routers import (
    auth_router,
    health_router,
    products_router,
    sales_router,
    upload_router,
)

setup_logging()
settings: Settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    create_schema()
    logger.info(
        "%s started (environment=%s, CORS origins=%s)",
        settings.APP_NAME,
        settings.ENVIRONMENT,
        ", ".join(settings.cors_origins) or "none",
    )
    try:
        yield
    finally:
        engine.dispose()
        logger.info("Database connection pool closed")


app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)
if settings.LOG_REQUESTS:
    app.middleware("http")(log_requests)
register_error_handlers(app)

app.include_router(health_router)
for api_router in (auth_router, products_router, sales_router, upload_router):
    app.include_router(
        api_router,
        prefix=settings.API_PREFIX,
        dependencies=[Depends(rate_limit_api)],
    )


__all__ = ["app"]
