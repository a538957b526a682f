# backend/reserve_api/services/bookings/filler.py
"""
Structural filler for booking inserts.

Columns the partner channel does not own may still be NOT NULL without a
default (back-office flags, newer columns). Before each insert the required
columns missing from the record are filled:

1. explicit business defaults (notification flags cleared, confirmed set)
2. otherwise a neutral value by type category
"""

from datetime import datetime
from typing import Any, Callable

from .store import Category, ColumnInfo, date_value, time_value, timestamp_value

EXPLICIT_DEFAULTS: dict[str, Any] = {
    "sending_sms": 0,
    "remind_sms": 0,
    "annulation": 0,
    "refuse": 0,
    "is_waiting": 0,
    "confirmed": 1,
}

# category -> (start, now) -> value
CATEGORY_FILLERS: dict[Category, Callable[[datetime, datetime], Any]] = {
    Category.INTEGER: lambda start, now: 0,
    Category.DECIMAL: lambda start, now: 0,
    Category.TIME: lambda start, now: time_value(Category.TIME, start),
    Category.DATE: lambda start, now: date_value(Category.DATE, start),
    Category.DATETIME: lambda start, now: timestamp_value(Category.DATETIME, now),
    Category.TEXT: lambda start, now: "",
}


def fill_required(
    columns: list[ColumnInfo],
    record: dict,
    start: datetime,
    now: datetime,
) -> dict:
    """Return a copy of `record` with every required column given a value."""
    data = dict(record)
    for col in columns:
        if col.name in data or not col.required:
            continue
        if col.name in EXPLICIT_DEFAULTS:
            data[col.name] = EXPLICIT_DEFAULTS[col.name]
        else:
            data[col.name] = CATEGORY_FILLERS[col.category](start, now)
    return data
