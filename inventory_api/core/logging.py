import json
import logging
import time
from datetime import datetime, timezone

from inventory_api.config import get_settings

# attributes passed through ``extra=`` that belong in structured output
_CONTEXT_FIELDS = ("method", "path", "status", "duration_ms", "client")

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for name in _CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=True, default=str)


def setup_logging() -> None:
    settings = get_settings()
    formatter: logging.Formatter
    if settings.LOG_JSON:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=_PLAIN_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers[:] = [handler]
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    root.setLevel(level if isinstance(level, int) else logging.INFO)

    if settings.LOG_REQUESTS:
        # our middleware already writes one line per request
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


access_logger = logging.getLogger("inventory_api.access")


async def log_requests(request, call_next):
    """Emit one access line per request: method, path, status and duration."""
    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        access_logger.info(
            "%s %s -> %s (%sms)",
            request.method,
            request.url.path,
            status_code,
            elapsed_ms,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": status_code,
                "duration_ms": elapsed_ms,
                "client": request.client.host if request.client else None,
            },
        )
