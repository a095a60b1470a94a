from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, date, datetime, timedelta

from .models import Day, Trip, TripMeta

# Indexed by day-of-week with Sunday = 0
WEEKDAY_LABELS: tuple[str, ...] = ("星期日", "星期一", "星期二", "星期三", "星期四", "星期五", "星期六")


def parse_date(value: str) -> date:
    """Parse ``YYYY-MM-DD``; raises ValueError on anything else."""
    d = datetime.strptime(value.strip(), "%Y-%m-%d").date()
    # strptime also takes unpadded fields such as 2026-2-4
    if d.isoformat() != value.strip():
        raise ValueError(f"expected YYYY-MM-DD, got {value!r}")
    return d


def weekday_label(d: date | str) -> str:
    if isinstance(d, str):
        d = parse_date(d)
    # date.weekday(): Monday = 0
    return WEEKDAY_LABELS[(d.weekday() + 1) % 7]


def iter_dates(start: date, end: date) -> Iterator[date]:
    cur = start
    while cur <= end:
        yield cur
        cur += timedelta(days=1)


def enumerate_dates(start: str, end: str) -> list[str]:
    """Every calendar day from ``start`` to ``end`` inclusive.

    A reversed range yields an empty list rather than an error.
    """
    return [d.isoformat() for d in iter_dates(parse_date(start), parse_date(end))]


def empty_day(ds: str) -> Day:
    return Day(date=ds, weekday=weekday_label(ds))


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def empty_trip(start: str, end: str, participants: list[str] | None = None) -> Trip:
    start, end = parse_date(start).isoformat(), parse_date(end).isoformat()
    days = [empty_day(ds) for ds in enumerate_dates(start, end)]
    return Trip(
        meta=TripMeta(
            start_date=start,
            end_date=end,
            created_at=utc_now_iso(),
            participants=list(participants or []),
        ),
        days=days,
    )


__all__ = [
    "WEEKDAY_LABELS",
    "empty_day",
    "empty_trip",
    "enumerate_dates",
    "iter_dates",
    "parse_date",
    "utc_now_iso",
    "weekday_label",
]
