"""Trip document dataclasses.

The trip is persisted as one camelCase JSON document:

    Trip -> meta: TripMeta, days: [Day -> meals: [Meal -> booking?], specialEvents: [...]]

Parsing is shape-level only: wrong container types raise ``ValidationError``,
missing keys take defaults and unknown keys are carried in ``extra`` so a
load/save cycle never drops data written by a newer client.

Older documents stored fixed ``lunch``/``dinner`` slots per day and a single
free-text ``special``; ``Day.from_dict`` migrates both into ``meals`` and
``specialEvents`` (see ``_migrate_legacy_slots`` / ``_migrate_legacy_special``).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .errors import ValidationError

MealType = Literal["lunch", "dinner"]
BookingState = Literal["none", "draft", "booked"]

MEAL_TYPES: tuple[MealType, MealType] = ("lunch", "dinner")
DEFAULT_TIME_SLOT = "12:00"
LEGACY_TIME_SLOTS: dict[str, str] = {"lunch": "12:00", "dinner": "19:00"}

# camelCase JSON key -> dataclass attribute
_BOOKING_KEYS = {
    "place": "place",
    "time": "time",
    "people": "people",
    "ref": "ref",
    "contact": "contact",
    "price": "price",
    "url": "url",
    "googleMaps": "google_maps",
    "notes": "notes",
}
_EVENT_KEYS = ("description", "time", "link", "category")


def _as_dict(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValidationError(f"{what} must be an object")
    return value


def _as_list(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{what} must be an array")
    return value


def _extra(d: dict[str, Any], known: set[str] | tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if k not in known}


@dataclass
class Booking:
    place: str | None = None
    time: str | None = None  # e.g. "2026-02-05 19:30"
    people: int | None = None
    ref: str | None = None
    contact: str | None = None
    price: float | None = None
    url: str | None = None
    google_maps: str | None = None
    notes: str | None = None
    is_booked: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> Booking:
        d = _as_dict(raw, "booking")
        kwargs = {attr: d.get(key) for key, attr in _BOOKING_KEYS.items()}
        return cls(
            **kwargs,
            is_booked=bool(d.get("isBooked", False)),
            extra=_extra(d, set(_BOOKING_KEYS) | {"isBooked"}),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, attr in _BOOKING_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                out[key] = value
        out["isBooked"] = self.is_booked
        out.update(self.extra)
        return out

    def is_empty(self) -> bool:
        if self.is_booked or self.extra:
            return False
        return all(getattr(self, attr) in (None, "") for attr in _BOOKING_KEYS.values())


def booking_state(booking: Booking | None) -> BookingState:
    """Display state of a meal's booking; ``isBooked`` is the only source of truth."""
    if booking is None:
        return "none"
    return "booked" if booking.is_booked else "draft"


@dataclass
class Meal:
    id: str
    note: str = ""
    participants: list[str] = field(default_factory=list)
    time_slot: str = DEFAULT_TIME_SLOT  # HH:mm
    type: MealType = "lunch"
    booking: Booking | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def booking_state(self) -> BookingState:
        return booking_state(self.booking)

    @property
    def has_booking(self) -> bool:
        return self.booking_state == "booked"

    @classmethod
    def from_dict(cls, raw: Any) -> Meal:
        d = _as_dict(raw, "meal")
        booking = d.get("booking")
        meal_type = d.get("type") or "lunch"
        if meal_type not in MEAL_TYPES:
            raise ValidationError(f"meal type must be one of {MEAL_TYPES}")
        return cls(
            id=str(d.get("id") or ""),
            note=d.get("note") or "",
            participants=list(_as_list(d.get("participants"), "meal.participants")),
            time_slot=d.get("timeSlot") or DEFAULT_TIME_SLOT,
            type=meal_type,
            booking=Booking.from_dict(booking) if booking else None,
            extra=_extra(d, ("id", "note", "participants", "timeSlot", "type", "booking")),
        )

    def to_dict(self) -> dict[str, Any]:
        out = {
            "id": self.id,
            "note": self.note,
            "participants": list(self.participants),
            "timeSlot": self.time_slot,
            "type": self.type,
            "booking": self.booking.to_dict() if self.booking is not None else None,
        }
        out.update(self.extra)
        return out


@dataclass
class SpecialEvent:
    id: str
    title: str = ""
    description: str | None = None
    time: str | None = None  # HH:mm
    link: str | None = None
    category: str | None = None  # e.g. transport, activity, shopping
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> SpecialEvent:
        d = _as_dict(raw, "special event")
        return cls(
            id=str(d.get("id") or ""),
            title=d.get("title") or "",
            extra=_extra(d, ("id", "title") + _EVENT_KEYS),
            **{k: d.get(k) for k in _EVENT_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "title": self.title}
        for k in _EVENT_KEYS:
            value = getattr(self, k)
            if value is not None:
                out[k] = value
        out.update(self.extra)
        return out


def _legacy_slot_has_content(slot: dict[str, Any]) -> bool:
    return bool(slot.get("note") or slot.get("participants") or slot.get("booking"))


def _legacy_time_slot(kind: str, booking: dict[str, Any] | None) -> str:
    if booking:
        if booking.get("timeSlot"):
            return str(booking["timeSlot"])
        when = str(booking.get("time") or "")
        # "YYYY-MM-DD HH:mm" -> "HH:mm"
        if " " in when:
            return when.rsplit(" ", 1)[1][:5]
    return LEGACY_TIME_SLOTS[kind]


def _migrate_legacy_slots(date: str, d: dict[str, Any]) -> list[Meal]:
    meals: list[Meal] = []
    for kind in MEAL_TYPES:
        slot = d.get(kind)
        if not isinstance(slot, dict) or not _legacy_slot_has_content(slot):
            continue
        booking = slot.get("booking") or None
        if booking is not None:
            booking = _as_dict(booking, f"day.{kind}.booking")
        meals.append(
            Meal(
                id=f"meal-{date}-{kind}",
                note=slot.get("note") or "",
                participants=list(_as_list(slot.get("participants"), f"day.{kind}.participants")),
                time_slot=_legacy_time_slot(kind, booking),
                type=kind,
                booking=Booking.from_dict(booking) if booking else None,
            )
        )
    return meals


def _migrate_legacy_special(date: str, special: str, events: list[SpecialEvent]) -> tuple[str, list[SpecialEvent]]:
    if events or not special.strip():
        return special, events
    return "", [SpecialEvent(id=f"event-{date}-legacy", title=special.strip())]


@dataclass
class Day:
    date: str  # YYYY-MM-DD
    weekday: str = ""
    meals: list[Meal] = field(default_factory=list)
    special: str = ""  # legacy free text, superseded by special_events
    special_events: list[SpecialEvent] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def display_special(self) -> list[str]:
        if self.special_events:
            return [e.title for e in self.special_events]
        return [self.special] if self.special else []

    @classmethod
    def from_dict(cls, raw: Any) -> Day:
        d = _as_dict(raw, "day")
        date = str(d.get("date") or "")
        if not date:
            raise ValidationError("day.date is required")
        known: tuple[str, ...] = ("date", "weekday", "meals", "special", "specialEvents")
        if "meals" in d:
            meals = [Meal.from_dict(m) for m in _as_list(d.get("meals"), "day.meals")]
        else:
            meals = _migrate_legacy_slots(date, d)
            known += MEAL_TYPES
        events = [SpecialEvent.from_dict(e) for e in _as_list(d.get("specialEvents"), "day.specialEvents")]
        special, events = _migrate_legacy_special(date, str(d.get("special") or ""), events)
        return cls(
            date=date,
            weekday=d.get("weekday") or "",
            meals=meals,
            special=special,
            special_events=events,
            extra=_extra(d, known),
        )

    def to_dict(self) -> dict[str, Any]:
        out = {
            "date": self.date,
            "weekday": self.weekday,
            "meals": [m.to_dict() for m in self.meals],
            "special": self.special,
            "specialEvents": [e.to_dict() for e in self.special_events],
        }
        out.update(self.extra)
        return out


@dataclass
class TripMeta:
    start_date: str
    end_date: str
    created_at: str = ""
    participants: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> TripMeta:
        d = _as_dict(raw, "meta")
        return cls(
            start_date=d.get("startDate") or "",
            end_date=d.get("endDate") or "",
            created_at=d.get("createdAt") or "",
            participants=list(_as_list(d.get("participants"), "meta.participants")),
            extra=_extra(d, ("startDate", "endDate", "createdAt", "participants")),
        )

    def to_dict(self) -> dict[str, Any]:
        out = {
            "startDate": self.start_date,
            "endDate": self.end_date,
            "createdAt": self.created_at,
            "participants": list(self.participants),
        }
        out.update(self.extra)
        return out


@dataclass
class Trip:
    meta: TripMeta
    days: list[Day] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def get_day(self, date: str) -> Day | None:
        for d in self.days:
            if d.date == date:
                return d
        return None

    def meal_count(self) -> int:
        return sum(len(d.meals) for d in self.days)

    @classmethod
    def from_dict(cls, raw: Any) -> Trip:
        d = _as_dict(raw, "trip")
        days = [Day.from_dict(x) for x in _as_list(d.get("days"), "trip.days")]
        return cls(
            meta=TripMeta.from_dict(d.get("meta") or {}),
            days=days,
            extra=_extra(d, ("meta", "days")),
        )

    def to_dict(self) -> dict[str, Any]:
        out = {"meta": self.meta.to_dict(), "days": [x.to_dict() for x in self.days]}
        out.update(self.extra)
        return out


__all__ = [
    "Booking",
    "BookingState",
    "Day",
    "Meal",
    "MealType",
    "SpecialEvent",
    "Trip",
    "TripMeta",
    "booking_state",
]
