"""Day / meal / special-event mutations on a Trip.

Every function returns a new ``Trip`` and leaves its input untouched; callers
persist the result with one whole-document save. Structural edits re-derive
``meta.start_date`` / ``meta.end_date`` from the resulting day list.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import timedelta
from typing import Literal

from .errors import LastDayError, NotFoundError, ValidationError
from .models import Day, Meal, SpecialEvent, Trip
from .trip_factory import empty_day, parse_date

log = logging.getLogger(__name__)

Position = Literal["before", "after"]


def new_meal_id() -> str:
    return f"meal-{uuid.uuid4().hex[:12]}"


def new_event_id() -> str:
    return f"event-{uuid.uuid4().hex[:12]}"


def _require_day(trip: Trip, date: str) -> Day:
    day = trip.get_day(date)
    if day is None:
        raise NotFoundError(f"day {date} not found")
    return day


def _with_days(trip: Trip, days: list[Day]) -> Trip:
    days = sorted(days, key=lambda d: d.date)
    meta = trip.meta
    if days:
        meta = replace(meta, start_date=days[0].date, end_date=days[-1].date)
    return replace(trip, meta=meta, days=days)


def _map_day(trip: Trip, date: str, new_day: Day) -> Trip:
    _require_day(trip, date)
    return replace(trip, days=[new_day if d.date == date else d for d in trip.days])


def add_day(trip: Trip, position: Position) -> Trip:
    if position not in ("before", "after"):
        raise ValidationError("position must be 'before' or 'after'")
    if not trip.days:
        raise ValidationError("trip has no days to extend")
    dates = sorted(d.date for d in trip.days)
    if position == "before":
        new_date = parse_date(dates[0]) - timedelta(days=1)
    else:
        new_date = parse_date(dates[-1]) + timedelta(days=1)
    log.info("add_day position=%s date=%s", position, new_date.isoformat())
    return _with_days(trip, [*trip.days, empty_day(new_date.isoformat())])


def remove_day(trip: Trip, date: str) -> Trip:
    _require_day(trip, date)
    if len(trip.days) <= 1:
        raise LastDayError()
    log.info("remove_day date=%s", date)
    return _with_days(trip, [d for d in trip.days if d.date != date])


def replace_day(trip: Trip, day: Day) -> Trip:
    return _map_day(trip, day.date, day)


def save_meal(trip: Trip, date: str, meal: Meal) -> Trip:
    """Insert ``meal`` into the day, replacing any meal with the same id."""
    day = _require_day(trip, date)
    if not meal.id:
        meal = replace(meal, id=new_meal_id())
    if meal.booking is not None and meal.booking.is_empty():
        meal = replace(meal, booking=None)
    if any(m.id == meal.id for m in day.meals):
        meals = [meal if m.id == meal.id else m for m in day.meals]
    else:
        meals = [*day.meals, meal]
    return _map_day(trip, date, replace(day, meals=meals))


def delete_meal(trip: Trip, date: str, meal_id: str) -> Trip:
    day = _require_day(trip, date)
    if not any(m.id == meal_id for m in day.meals):
        raise NotFoundError(f"meal {meal_id} not found on {date}")
    return _map_day(trip, date, replace(day, meals=[m for m in day.meals if m.id != meal_id]))


def move_meal(trip: Trip, from_date: str, meal_id: str, to_date: str) -> Trip:
    """Move a meal to another day unchanged (same id and time slot), appended last."""
    source = _require_day(trip, from_date)
    target = _require_day(trip, to_date)
    meal = next((m for m in source.meals if m.id == meal_id), None)
    if meal is None:
        raise NotFoundError(f"meal {meal_id} not found on {from_date}")
    if from_date == to_date:
        return trip
    new_source = replace(source, meals=[m for m in source.meals if m.id != meal_id])
    new_target = replace(target, meals=[*target.meals, meal])
    days = []
    for d in trip.days:
        if d.date == from_date:
            days.append(new_source)
        elif d.date == to_date:
            days.append(new_target)
        else:
            days.append(d)
    log.info("move_meal id=%s from=%s to=%s", meal_id, from_date, to_date)
    return replace(trip, days=days)


def set_special_events(trip: Trip, date: str, events: list[SpecialEvent]) -> Trip:
    day = _require_day(trip, date)
    events = [e if e.id else replace(e, id=new_event_id()) for e in events]
    return _map_day(trip, date, replace(day, special_events=events))


__all__ = [
    "Position",
    "add_day",
    "delete_meal",
    "move_meal",
    "new_event_id",
    "new_meal_id",
    "remove_day",
    "replace_day",
    "save_meal",
    "set_special_events",
]
