from datetime import date, datetime, timezone

from churchconnect.exceptions import ValidationError


def utcnow():
    return datetime.now(timezone.utc)


def today():
    return utcnow().date()


def as_utc(value):
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def isoformat(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    return value.isoformat()


def parse_date(value, field_name="date"):
    """Parse a YYYY-MM-DD string into a date, raising ValidationError (400) on bad input."""
    if value is None or isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}. Expected format YYYY-MM-DD")
