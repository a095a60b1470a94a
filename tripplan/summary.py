"""Per-day statistics and the plain-text trip summary used when publishing."""
from __future__ import annotations

import math
from typing import TypedDict

from .models import Day, Meal, Trip

MEAL_LABELS = {"lunch": "午餐", "dinner": "晚餐"}


class DayStats(TypedDict):
    date: str
    meal_count: int
    lunch_count: int
    dinner_count: int
    booked_count: int
    participant_count: int
    total_budget: float
    earliest_time_slot: str | None
    latest_time_slot: str | None
    with_place: int
    with_link: int
    meals_per_participant: dict[str, int]


def _price(meal: Meal) -> float:
    """Booking price as a number; blank or non-numeric prices count as 0."""
    if meal.booking is None or meal.booking.price in (None, ""):
        return 0
    try:
        price = float(meal.booking.price)
    except (TypeError, ValueError):
        return 0
    return price if math.isfinite(price) else 0


def day_stats(day: Day, participants: list[str]) -> DayStats:
    meals = day.meals
    slots = [str(m.time_slot) for m in meals]
    return {
        "date": day.date,
        "meal_count": len(meals),
        "lunch_count": sum(1 for m in meals if m.type == "lunch"),
        "dinner_count": sum(1 for m in meals if m.type == "dinner"),
        "booked_count": sum(1 for m in meals if m.has_booking),
        "participant_count": len({str(p) for m in meals for p in m.participants}),
        "total_budget": sum(_price(m) for m in meals),
        "earliest_time_slot": min(slots) if slots else None,
        "latest_time_slot": max(slots) if slots else None,
        "with_place": sum(1 for m in meals if m.booking is not None and m.booking.place),
        "with_link": sum(1 for m in meals if m.booking is not None and (m.booking.url or m.booking.google_maps)),
        "meals_per_participant": {p: sum(1 for m in meals if p in m.participants) for p in participants},
    }


def _meal_line(meal: Meal) -> str:
    parts = [str(meal.time_slot), MEAL_LABELS.get(meal.type, meal.type)]
    if meal.booking is not None and meal.booking.place:
        parts.append(str(meal.booking.place))
    if meal.note:
        parts.append(str(meal.note))
    if meal.has_booking:
        parts.append("(booked)")
    if meal.participants:
        parts.append("[" + ", ".join(str(p) for p in meal.participants) + "]")
    return " ".join(parts)


def trip_summary(trip: Trip) -> str:
    lines = [f"{trip.meta.start_date} → {trip.meta.end_date}"]
    if trip.meta.participants:
        lines.append("Participants: " + ", ".join(str(p) for p in trip.meta.participants))
    for day in trip.days:
        lines.append(f"{day.date} {day.weekday}".rstrip())
        for meal in sorted(day.meals, key=lambda m: str(m.time_slot)):
            lines.append("  - " + _meal_line(meal))
        for title in day.display_special():
            lines.append(f"  * {title}")
    return "\n".join(lines)


__all__ = ["DayStats", "day_stats", "trip_summary"]
