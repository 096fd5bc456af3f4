from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta

from django.conf import settings
from django.utils import timezone

from . import errors


def parse_date(value, field: str = "date") -> date:
    """Accept ``date`` objects or ISO ``YYYY-MM-DD`` strings."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise errors.ValidationError(f"Invalid {field}: {value!r}.") from None


def count_nights(check_in: date, check_out: date) -> int:
    return math.ceil((check_out - check_in) / timedelta(days=1))


def _at(day: date, moment: time) -> datetime:
    value = datetime.combine(day, moment)
    if settings.USE_TZ:
        return timezone.make_aware(value)
    return value


def day_window(start_date=None, end_date=None) -> tuple[datetime | None, datetime | None]:
    """Turn an inclusive pair of calendar days into created_at bounds."""
    start = _at(parse_date(start_date, "start_date"), time.min) if start_date else None
    end = _at(parse_date(end_date, "end_date"), time.max) if end_date else None
    return start, end
