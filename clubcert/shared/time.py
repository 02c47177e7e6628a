from datetime import date, datetime, timezone


def now_utc() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def fmt_long_date(value: datetime | date | None) -> str:
    """Format as D Month YYYY, e.g. 5 March 2025."""
    if not value:
        return ""
    return value.strftime("%d %B %Y").lstrip("0")
