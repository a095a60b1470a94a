"""Trip API: initialization, whole-document read/replace and per-day edits.

Every write loads the current document, applies one functional edit from
``trip_ops`` and persists the whole document in a single save. Responses carry
a weak ETag; a write that sends ``If-Match`` for an outdated version is
rejected with 412, a write without it keeps last-writer-wins semantics.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from flask import Blueprint, current_app, jsonify, request
from werkzeug.wrappers.response import Response

from . import trip_ops
from .auth import enforce_auth
from .errors import NotFoundError, NotInitializedError, ValidationError
from .etag import check_if_match, document_etag
from .json_store import TripStore
from .models import Day, Meal, SpecialEvent, Trip
from .summary import day_stats
from .trip_factory import empty_trip

log = logging.getLogger(__name__)

bp = Blueprint("trip_api", __name__, url_prefix="/api")
bp.before_request(enforce_auth)


def _store() -> TripStore:
    return current_app.trip_store  # type: ignore[attr-defined]


def _body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _trip_response(trip: Trip, **extra: Any) -> Response:
    doc = trip.to_dict()
    resp = jsonify({"ok": True, "trip": doc, **extra})
    resp.headers["ETag"] = document_etag("trip", doc)
    return resp


def _load_for_write() -> Trip:
    trip = _store().load()
    check_if_match(document_etag("trip", trip.to_dict()))
    return trip


def _commit(trip: Trip, **extra: Any) -> Response:
    _store().save(trip)
    return _trip_response(trip, **extra)


@bp.post("/init")
def init_trip():
    data = _body()
    start = data.get("start")
    end = data.get("end")
    participants = data.get("participants") or []
    if not start or not end:
        raise ValidationError("start and end are required (YYYY-MM-DD)")
    if not isinstance(participants, list):
        raise ValidationError("participants must be an array")
    if not data.get("force"):
        try:
            existing = _store().load()
        except NotInitializedError:
            existing = None
        if existing is not None:
            # Idempotent: hand back the stored trip untouched, no rewrite
            return _trip_response(existing, already=True)
    try:
        trip = empty_trip(str(start), str(end), [str(p) for p in participants])
    except ValueError as e:
        raise ValidationError("start and end must be dates (YYYY-MM-DD)") from e
    log.info("Initializing trip %s..%s with %d participants (force=%s)", start, end, len(participants), bool(data.get("force")))
    return _commit(trip)


@bp.get("/trip")
def get_trip():
    return _trip_response(_store().load())


@bp.post("/trip")
def replace_trip():
    raw = _body().get("trip")
    if not raw:
        raise ValidationError("Missing trip")
    trip = Trip.from_dict(raw)
    store = _store()
    if request.headers.get("If-Match"):
        current = document_etag("trip", store.load().to_dict()) if store.exists() else None
        check_if_match(current)
    store.save(trip)
    resp = jsonify({"ok": True})
    resp.headers["ETag"] = document_etag("trip", trip.to_dict())
    return resp


@bp.post("/trip/days")
def add_day():
    position = _body().get("position")
    trip = _load_for_write()
    return _commit(trip_ops.add_day(trip, position))


@bp.put("/trip/days/<date>")
def replace_day(date: str):
    raw = _body().get("day")
    if not isinstance(raw, dict):
        raise ValidationError("Missing day")
    day = Day.from_dict({**raw, "date": date})
    trip = _load_for_write()
    return _commit(trip_ops.replace_day(trip, day))


@bp.delete("/trip/days/<date>")
def remove_day(date: str):
    trip = _load_for_write()
    return _commit(trip_ops.remove_day(trip, date))


@bp.get("/trip/days/<date>/summary")
def day_summary(date: str):
    trip = _store().load()
    day = trip.get_day(date)
    if day is None:
        raise NotFoundError(f"day {date} not found")
    return jsonify({"ok": True, "stats": day_stats(day, trip.meta.participants)})


@bp.put("/trip/days/<date>/meals")
def save_meal(date: str):
    raw = _body().get("meal")
    if not isinstance(raw, dict):
        raise ValidationError("Missing meal")
    meal = Meal.from_dict(raw)
    if not meal.id:
        meal = replace(meal, id=trip_ops.new_meal_id())
    trip = trip_ops.save_meal(_load_for_write(), date, meal)
    saved = next(m for m in trip.get_day(date).meals if m.id == meal.id)  # type: ignore[union-attr]
    return _commit(trip, meal=saved.to_dict())


@bp.delete("/trip/days/<date>/meals/<meal_id>")
def delete_meal(date: str, meal_id: str):
    trip = _load_for_write()
    return _commit(trip_ops.delete_meal(trip, date, meal_id))


@bp.post("/trip/days/<date>/meals/<meal_id>/move")
def move_meal(date: str, meal_id: str):
    target = _body().get("target")
    if not target:
        raise ValidationError("target date required")
    trip = _load_for_write()
    return _commit(trip_ops.move_meal(trip, date, meal_id, str(target)))


@bp.put("/trip/days/<date>/special-events")
def set_special_events(date: str):
    raw = _body().get("specialEvents")
    if not isinstance(raw, list):
        raise ValidationError("specialEvents must be an array")
    events = [SpecialEvent.from_dict(e) for e in raw]
    trip = _load_for_write()
    return _commit(trip_ops.set_special_events(trip, date, events))
