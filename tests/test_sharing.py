import copy

import pytest

from tripplan import sharing
from tripplan.errors import NotFoundError, ValidationError
from tripplan.models import Meal
from tripplan.trip_factory import empty_trip
from tripplan.trip_ops import save_meal


@pytest.fixture
def feed():
    older = sharing.make_post("Kyoto tips", "Go early", author="Ben", tags="food, temples")
    newer = sharing.make_post("Osaka", "Street food")
    return sharing.add_post(sharing.add_post([], older), newer)


def test_make_post_defaults():
    post = sharing.make_post("  Hello ", "body")
    assert post["title"] == "Hello"
    assert post["author"] == sharing.ANONYMOUS
    assert post["category"] == sharing.DEFAULT_CATEGORY
    assert post["likes"] == 0
    assert post["views"] == 1
    assert post["comments"] == []
    assert post["tags"] == []
    assert post["trip"] is None
    assert post["timestamp"].endswith("Z")


@pytest.mark.parametrize("title,content", [("", "x"), ("x", "   "), (None, "x"), ("x", 5)])
def test_make_post_requires_title_and_content(title, content):
    with pytest.raises(ValidationError):
        sharing.make_post(title, content)


@pytest.mark.parametrize(
    "tags,expected",
    [(None, []), ("a, b,,c ", ["a", "b", "c"]), (["x", " ", "y"], ["x", "y"])],
)
def test_parse_tags(tags, expected):
    assert sharing.parse_tags(tags) == expected


def test_parse_tags_rejects_objects():
    with pytest.raises(ValidationError):
        sharing.parse_tags({"a": 1})


def test_add_post_puts_newest_first(feed):
    assert [p["title"] for p in feed] == ["Osaka", "Kyoto tips"]
    assert feed[1]["tags"] == ["food", "temples"]


def test_edit_post_sets_edited_at(feed):
    pid = feed[1]["id"]
    out = sharing.edit_post(feed, pid, {"title": "Kyoto tips v2", "tags": ["x"]})
    post = sharing.find_post(out, pid)
    assert post["title"] == "Kyoto tips v2"
    assert post["tags"] == ["x"]
    assert post["content"] == "Go early"
    assert "editedAt" in post
    with pytest.raises(ValidationError):
        sharing.edit_post(feed, pid, {"title": ""})


def test_operations_leave_input_untouched(feed):
    snapshot = copy.deepcopy(feed)
    pid = feed[0]["id"]
    sharing.like_post(feed, pid)
    sharing.view_post(feed, pid)
    sharing.edit_post(feed, pid, {"content": "changed"})
    sharing.add_comment(feed, pid, sharing.make_comment("Alex", "nice"))
    sharing.delete_post(feed, pid)
    assert feed == snapshot


def test_like_and_view_counters(feed):
    pid = feed[0]["id"]
    out = sharing.like_post(sharing.like_post(feed, pid), pid)
    out = sharing.view_post(out, pid)
    post = sharing.find_post(out, pid)
    assert (post["likes"], post["views"]) == (2, 2)


def test_delete_post(feed):
    out = sharing.delete_post(feed, feed[0]["id"])
    assert [p["title"] for p in out] == ["Kyoto tips"]
    with pytest.raises(NotFoundError):
        sharing.delete_post(out, feed[0]["id"])


def test_comments(feed):
    pid = feed[0]["id"]
    comment = sharing.make_comment("Alex", "Try takoyaki")
    out = sharing.add_comment(feed, pid, comment)
    out = sharing.like_comment(out, pid, comment["id"])
    stored = sharing.find_comment(sharing.find_post(out, pid), comment["id"])
    assert stored["content"] == "Try takoyaki"
    assert stored["likes"] == 1
    with pytest.raises(NotFoundError):
        sharing.like_comment(out, pid, "missing")
    with pytest.raises(ValidationError):
        sharing.make_comment("", "text")


def test_unknown_post_is_not_found(feed):
    with pytest.raises(NotFoundError):
        sharing.like_post(feed, "missing")


def test_publish_trip_embeds_summary_and_snapshot():
    trip = empty_trip("2026-02-04", "2026-02-05", ["Alex"])
    trip = save_meal(trip, "2026-02-04", Meal(id="m1", note="ramen", participants=["Alex"]))
    post = sharing.publish_trip(trip, author="Alex", tags="japan")
    assert post["title"] == "Trip 2026-02-04 – 2026-02-05"
    assert "ramen" in post["content"]
    assert post["trip"] == trip.to_dict()
    assert post["tags"] == ["japan"]
    assert sharing.publish_trip(trip, title="Our trip")["title"] == "Our trip"


def test_non_object_entries_are_skipped():
    post = sharing.make_post("Hi", "body")
    feed = [7, post, ["x"]]
    assert sharing.find_post(feed, post["id"]) == post
    out = sharing.add_comment(sharing.like_post(feed, post["id"]), post["id"], sharing.make_comment("A", "B"))
    assert out[0] == 7 and out[2] == ["x"]
    assert sharing.find_post(out, post["id"])["likes"] == 1
    assert sharing.delete_post(out, post["id"]) == [7, ["x"]]
    with pytest.raises(NotFoundError):
        sharing.view_post(feed, "missing")
