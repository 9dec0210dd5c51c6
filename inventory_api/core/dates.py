from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def today_utc() -> date:
    return utcnow().date()


def as_date(value) -> Optional[date]:
    """Coerce a driver value (date, datetime or ISO text) to a date; None if unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date) or value is None:
        return value
    text = str(value).strip()[:10]
    try:
        return date.fromisoformat(text) if text else None
    except ValueError:
        return None


def isoformat_cell(value):
    """Render spreadsheet date/time cells as ISO strings; leave others untouched."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
