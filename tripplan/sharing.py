"""Discussion feed operations.

Posts are kept as plain JSON objects (shape documented by the TypedDicts
below) and every operation returns a new list, leaving the input untouched,
so the API layer can persist the whole array in one save.
"""
from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, NotRequired, TypedDict

from .errors import NotFoundError, ValidationError
from .models import Trip
from .summary import trip_summary

DEFAULT_CATEGORY = "其他"
ANONYMOUS = "匿名"


class Comment(TypedDict):
    id: str
    author: str
    content: str
    timestamp: str
    likes: int


class TravelPost(TypedDict):
    id: str
    title: str
    author: str
    content: str
    trip: NotRequired[dict[str, Any] | None]
    category: str
    timestamp: str
    likes: int
    comments: list[Comment]
    views: int
    tags: list[str]
    editedAt: NotRequired[str]


def _now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")


def _new_id() -> str:
    return uuid.uuid4().hex


def parse_tags(tags: Any) -> list[str]:
    """Accept a list or a comma-separated string; blanks are dropped."""
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    if not isinstance(tags, list):
        raise ValidationError("tags must be a list or a comma-separated string")
    return [str(t).strip() for t in tags if str(t).strip()]


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _required_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} required")
    return value.strip()


def _bump(counter: Any) -> int:
    try:
        return int(counter or 0) + 1
    except (TypeError, ValueError):
        return 1


def _comments(post: dict[str, Any]) -> list[Any]:
    comments = post.get("comments")
    return comments if isinstance(comments, list) else []


def find_post(posts: list[dict[str, Any]], post_id: str) -> dict[str, Any]:
    for p in posts:
        if isinstance(p, dict) and p.get("id") == post_id:
            return p
    raise NotFoundError(f"post {post_id} not found")


def _update_post(
    posts: list[dict[str, Any]], post_id: str, fn: Callable[[dict[str, Any]], dict[str, Any]]
) -> list[dict[str, Any]]:
    find_post(posts, post_id)
    return [fn(dict(p)) if isinstance(p, dict) and p.get("id") == post_id else p for p in posts]


def make_post(
    title: Any,
    content: Any,
    *,
    author: str | None = None,
    category: str | None = None,
    tags: Any = None,
    trip: Trip | None = None,
) -> TravelPost:
    post: TravelPost = {
        "id": _new_id(),
        "title": _required_text(title, "title"),
        "author": _text(author) or ANONYMOUS,
        "content": _required_text(content, "content"),
        "trip": trip.to_dict() if trip is not None else None,
        "category": _text(category) or DEFAULT_CATEGORY,
        "timestamp": _now(),
        "likes": 0,
        "comments": [],
        "views": 1,
        "tags": parse_tags(tags),
    }
    return post


def add_post(posts: list[dict[str, Any]], post: TravelPost) -> list[dict[str, Any]]:
    """Newest first."""
    return [dict(post), *posts]


def edit_post(posts: list[dict[str, Any]], post_id: str, changes: dict[str, Any]) -> list[dict[str, Any]]:
    def _apply(p: dict[str, Any]) -> dict[str, Any]:
        if "title" in changes:
            p["title"] = _required_text(changes["title"], "title")
        if "content" in changes:
            p["content"] = _required_text(changes["content"], "content")
        if "category" in changes:
            p["category"] = _text(changes.get("category")) or DEFAULT_CATEGORY
        if "tags" in changes:
            p["tags"] = parse_tags(changes["tags"])
        p["editedAt"] = _now()
        return p

    return _update_post(posts, post_id, _apply)


def delete_post(posts: list[dict[str, Any]], post_id: str) -> list[dict[str, Any]]:
    find_post(posts, post_id)
    return [p for p in posts if not (isinstance(p, dict) and p.get("id") == post_id)]


def like_post(posts: list[dict[str, Any]], post_id: str) -> list[dict[str, Any]]:
    return _update_post(posts, post_id, lambda p: {**p, "likes": _bump(p.get("likes"))})


def view_post(posts: list[dict[str, Any]], post_id: str) -> list[dict[str, Any]]:
    return _update_post(posts, post_id, lambda p: {**p, "views": _bump(p.get("views"))})


def make_comment(author: Any, content: Any) -> Comment:
    return {
        "id": _new_id(),
        "author": _required_text(author, "author"),
        "content": _required_text(content, "content"),
        "timestamp": _now(),
        "likes": 0,
    }


def add_comment(posts: list[dict[str, Any]], post_id: str, comment: Comment) -> list[dict[str, Any]]:
    return _update_post(
        posts, post_id, lambda p: {**p, "comments": [*_comments(p), dict(comment)]}
    )


def find_comment(post: dict[str, Any], comment_id: str) -> dict[str, Any]:
    for c in _comments(post):
        if isinstance(c, dict) and c.get("id") == comment_id:
            return c
    raise NotFoundError(f"comment {comment_id} not found")


def like_comment(posts: list[dict[str, Any]], post_id: str, comment_id: str) -> list[dict[str, Any]]:
    find_comment(find_post(posts, post_id), comment_id)

    def _apply(p: dict[str, Any]) -> dict[str, Any]:
        p["comments"] = [
            {**c, "likes": _bump(c.get("likes"))} if isinstance(c, dict) and c.get("id") == comment_id else c
            for c in _comments(p)
        ]
        return p

    return _update_post(posts, post_id, _apply)


def publish_trip(
    trip: Trip,
    *,
    title: str | None = None,
    author: str | None = None,
    category: str | None = None,
    tags: Any = None,
) -> TravelPost:
    """Build a post whose body is the trip summary and which carries a trip snapshot."""
    default_title = f"Trip {trip.meta.start_date} – {trip.meta.end_date}"
    return make_post(
        _text(title) or default_title,
        trip_summary(trip),
        author=author,
        category=category,
        tags=tags,
        trip=trip,
    )


__all__ = [
    "Comment",
    "TravelPost",
    "add_comment",
    "add_post",
    "delete_post",
    "edit_post",
    "find_comment",
    "find_post",
    "like_comment",
    "like_post",
    "make_comment",
    "make_post",
    "parse_tags",
    "publish_trip",
    "view_post",
]
