"""
Helpers horaires. Toutes les dates sont manipulées en UTC « aware » ;
SQLite renvoie des datetimes naïfs, considérés comme UTC.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from app.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_day_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Retourne [minuit, minuit suivant) du jour local courant, exprimés en UTC.
    Le fuseau local est un décalage fixe (UTC_OFFSET_HOURS, CAT sans heure d'été).
    """
    local_tz = timezone(timedelta(hours=settings.UTC_OFFSET_HOURS))
    local_now = (as_utc(now) or utcnow()).astimezone(local_tz)
    start = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
