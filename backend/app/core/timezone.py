from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.config import settings


def get_timezone_aware_now() -> datetime:
    """Current time in the configured timezone, stripped of tzinfo for SQLModel columns."""
    try:
        tz = ZoneInfo(settings.TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        return datetime.now(timezone.utc).replace(tzinfo=None)
    return datetime.now(tz).replace(tzinfo=None)
