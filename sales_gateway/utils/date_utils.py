"""Date manipulation utilities"""

from datetime import date, datetime, timezone
from typing import Optional


def parse_date(raw: object) -> Optional[date]:
    """
    Lenient date parsing for spreadsheet values.

    Accepts date/datetime objects, ISO dates ("2024-01-31"), ISO datetimes
    ("2024-01-31T10:00:00.000Z") and day-first dates ("31/01/2024").
    Returns None for empty or unparseable input.
    """
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw or "").strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass

    try:
        return datetime.strptime(text.split(" ")[0], "%d/%m/%Y").date()
    except ValueError:
        return None


def format_date(value: Optional[date]) -> str:
    """ISO string for transport; None becomes an empty string"""
    return value.isoformat() if value else ""


def submission_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp stamped on new purchases (day-first, 24h clock)"""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%d/%m/%Y, %H:%M:%S")
