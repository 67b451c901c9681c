"""
Daily aggregation for the 7-day trend charts.

``daily_totals`` is pure: given "now" and ``(timestamp, measure)`` pairs it
returns one ``(day, total)`` point per calendar day of the trailing window,
oldest first, with empty days present as zero. Days are local calendar days:
aware timestamps are converted into ``tz`` (the server's zone when ``tz`` is
None) before truncation; naive timestamps are taken as already local.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable

WINDOW_DAYS = 7

# PostgREST trims trailing zeros from fractional seconds
_FRACTION = re.compile(r"(?<=:\d\d)\.(\d+)")


def parse_timestamp(raw: datetime | str) -> datetime:
    if isinstance(raw, datetime):
        return raw
    value = str(raw).strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value)
    return datetime.fromisoformat(value)


def local_day(moment: datetime, tz: tzinfo | None = None) -> date:
    if moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.date()


def day_start(day: date, tz: tzinfo | None = None) -> datetime:
    """Aware datetime of local midnight at the start of ``day``."""
    start = datetime.combine(day, time.min)
    if tz is not None:
        return start.replace(tzinfo=tz)
    return start.astimezone()


def window(now: datetime, days: int = WINDOW_DAYS, tz: tzinfo | None = None) -> list[date]:
    today = local_day(now, tz)
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def daily_totals(
    now: datetime,
    entries: Iterable[tuple[datetime, float]],
    *,
    days: int = WINDOW_DAYS,
    tz: tzinfo | None = None,
) -> list[tuple[date, float]]:
    buckets: dict[date, float] = {day: 0 for day in window(now, days, tz)}
    for timestamp, measure in entries:
        day = local_day(timestamp, tz)
        # outside the window
        if day not in buckets:
            continue
        buckets[day] += measure
    return list(buckets.items())


def day_label(day: date) -> str:
    return f"{day:%b} {day.day}"


def chart_data(series: list[tuple[date, float]]) -> dict:
    """Labels/values payload for the Chart.js line charts."""
    return {
        "labels": [day_label(day) for day, _ in series],
        "values": [round(total, 2) for _, total in series],
    }
