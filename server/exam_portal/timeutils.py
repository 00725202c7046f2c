from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Timezone-aware UTC; naive datetimes are taken to already be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def as_naive_utc(moment: datetime) -> datetime:
    return as_utc(moment).replace(tzinfo=None)


def iso_utc(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a `Z` suffix, as browsers emit it."""
    return as_utc(moment).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def start_of_day(moment: datetime, tz_name: str = "UTC") -> datetime:
    """Local midnight of the day containing `moment` in `tz_name`, returned in UTC."""
    local = as_utc(moment).astimezone(ZoneInfo(tz_name))
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc)
