import copy

import pytest

from tripplan import trip_ops
from tripplan.errors import LastDayError, NotFoundError, ValidationError
from tripplan.models import Booking, Meal, SpecialEvent
from tripplan.trip_factory import empty_trip


@pytest.fixture
def trip():
    t = empty_trip("2026-02-04", "2026-02-06", ["Alex", "Ben"])
    t = trip_ops.save_meal(t, "2026-02-04", Meal(id="m1", note="sushi", time_slot="12:30"))
    t = trip_ops.save_meal(t, "2026-02-04", Meal(id="m2", type="dinner", time_slot="19:00"))
    return t


def _range_matches_days(t):
    dates = [d.date for d in t.days]
    return t.meta.start_date == min(dates) and t.meta.end_date == max(dates)


def test_add_day_before_and_after(trip):
    before = trip_ops.add_day(trip, "before")
    assert before.days[0].date == "2026-02-03"
    assert before.days[0].weekday == "星期二"
    assert _range_matches_days(before)
    after = trip_ops.add_day(before, "after")
    assert after.days[-1].date == "2026-02-07"
    assert len(after.days) == 5
    assert _range_matches_days(after)


def test_add_day_rejects_unknown_position(trip):
    with pytest.raises(ValidationError):
        trip_ops.add_day(trip, "middle")


def test_add_day_on_empty_trip_rejected():
    with pytest.raises(ValidationError):
        trip_ops.add_day(empty_trip("2026-02-06", "2026-02-04"), "after")


def test_remove_day_rederives_range(trip):
    out = trip_ops.remove_day(trip, "2026-02-04")
    assert [d.date for d in out.days] == ["2026-02-05", "2026-02-06"]
    assert out.meta.start_date == "2026-02-05"
    assert _range_matches_days(out)


def test_remove_middle_day_leaves_gap(trip):
    out = trip_ops.remove_day(trip, "2026-02-05")
    assert [d.date for d in out.days] == ["2026-02-04", "2026-02-06"]
    assert (out.meta.start_date, out.meta.end_date) == ("2026-02-04", "2026-02-06")


def test_remove_last_remaining_day_is_rejected():
    single = empty_trip("2026-02-04", "2026-02-04")
    with pytest.raises(LastDayError):
        trip_ops.remove_day(single, "2026-02-04")


def test_remove_unknown_day(trip):
    with pytest.raises(NotFoundError):
        trip_ops.remove_day(trip, "2030-01-01")


def test_operations_do_not_mutate_input(trip):
    snapshot = copy.deepcopy(trip)
    trip_ops.add_day(trip, "after")
    trip_ops.remove_day(trip, "2026-02-06")
    trip_ops.delete_meal(trip, "2026-02-04", "m1")
    trip_ops.move_meal(trip, "2026-02-04", "m1", "2026-02-05")
    assert trip == snapshot


def test_save_meal_replaces_by_id(trip):
    out = trip_ops.save_meal(trip, "2026-02-04", Meal(id="m1", note="udon", time_slot="12:30"))
    meals = out.get_day("2026-02-04").meals
    assert [m.id for m in meals] == ["m1", "m2"]
    assert meals[0].note == "udon"


def test_save_meal_assigns_id_and_drops_empty_booking(trip):
    out = trip_ops.save_meal(trip, "2026-02-05", Meal(id="", booking=Booking()))
    meal = out.get_day("2026-02-05").meals[0]
    assert meal.id.startswith("meal-")
    assert meal.booking is None


def test_delete_meal(trip):
    out = trip_ops.delete_meal(trip, "2026-02-04", "m2")
    assert [m.id for m in out.get_day("2026-02-04").meals] == ["m1"]
    with pytest.raises(NotFoundError):
        trip_ops.delete_meal(out, "2026-02-04", "m2")


def test_move_meal_preserves_id_and_count(trip):
    out = trip_ops.move_meal(trip, "2026-02-04", "m1", "2026-02-06")
    assert [m.id for m in out.get_day("2026-02-04").meals] == ["m2"]
    moved = out.get_day("2026-02-06").meals[-1]
    assert moved.id == "m1"
    assert moved.time_slot == "12:30"
    assert out.meal_count() == trip.meal_count()


def test_move_meal_appends_after_existing(trip):
    t = trip_ops.save_meal(trip, "2026-02-05", Meal(id="m3"))
    out = trip_ops.move_meal(t, "2026-02-04", "m2", "2026-02-05")
    assert [m.id for m in out.get_day("2026-02-05").meals] == ["m3", "m2"]


def test_move_meal_to_same_day_is_noop(trip):
    assert trip_ops.move_meal(trip, "2026-02-04", "m1", "2026-02-04") == trip


def test_move_meal_errors(trip):
    with pytest.raises(NotFoundError):
        trip_ops.move_meal(trip, "2026-02-04", "nope", "2026-02-05")
    with pytest.raises(NotFoundError):
        trip_ops.move_meal(trip, "2026-02-04", "m1", "2030-01-01")


def test_set_special_events_keeps_order_and_fills_ids(trip):
    events = [SpecialEvent(id="e1", title="Train"), SpecialEvent(id="", title="Onsen")]
    out = trip_ops.set_special_events(trip, "2026-02-05", events)
    got = out.get_day("2026-02-05").special_events
    assert [e.title for e in got] == ["Train", "Onsen"]
    assert got[0].id == "e1"
    assert got[1].id.startswith("event-")
