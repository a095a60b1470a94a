"""Sharing feed API.

``GET``/``POST /api/sharing`` read and replace the whole post array. The
per-post endpoints apply one feed operation and persist the array in one save;
``/api/sharing/publish`` posts a summary of the current trip.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, current_app, jsonify, request

from . import sharing
from .auth import enforce_auth
from .errors import ValidationError
from .json_store import SharingStore

log = logging.getLogger(__name__)

bp = Blueprint("sharing_api", __name__, url_prefix="/api/sharing")
bp.before_request(enforce_auth)


def _store() -> SharingStore:
    return current_app.sharing_store  # type: ignore[attr-defined]


def _body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@bp.get("")
def list_posts():
    return jsonify({"ok": True, "posts": _store().load()})


@bp.post("")
def replace_posts():
    posts = _body().get("posts")
    if not isinstance(posts, list):
        raise ValidationError("Posts must be an array")
    _store().save(posts)
    return jsonify({"ok": True})


@bp.post("/posts")
def create_post():
    data = _body()
    post = sharing.make_post(
        data.get("title"),
        data.get("content"),
        author=data.get("author"),
        category=data.get("category"),
        tags=data.get("tags"),
    )
    store = _store()
    store.save(sharing.add_post(store.load(), post))
    return jsonify({"ok": True, "post": post}), 201


@bp.put("/posts/<post_id>")
def update_post(post_id: str):
    store = _store()
    posts = sharing.edit_post(store.load(), post_id, _body())
    store.save(posts)
    return jsonify({"ok": True, "post": sharing.find_post(posts, post_id)})


@bp.delete("/posts/<post_id>")
def remove_post(post_id: str):
    store = _store()
    store.save(sharing.delete_post(store.load(), post_id))
    return jsonify({"ok": True})


@bp.post("/posts/<post_id>/like")
def like_post(post_id: str):
    store = _store()
    posts = sharing.like_post(store.load(), post_id)
    store.save(posts)
    return jsonify({"ok": True, "post": sharing.find_post(posts, post_id)})


@bp.post("/posts/<post_id>/view")
def view_post(post_id: str):
    store = _store()
    posts = sharing.view_post(store.load(), post_id)
    store.save(posts)
    return jsonify({"ok": True, "post": sharing.find_post(posts, post_id)})


@bp.post("/posts/<post_id>/comments")
def comment_post(post_id: str):
    data = _body()
    comment = sharing.make_comment(data.get("author"), data.get("content"))
    store = _store()
    store.save(sharing.add_comment(store.load(), post_id, comment))
    return jsonify({"ok": True, "comment": comment}), 201


@bp.post("/posts/<post_id>/comments/<comment_id>/like")
def like_comment(post_id: str, comment_id: str):
    store = _store()
    posts = sharing.like_comment(store.load(), post_id, comment_id)
    store.save(posts)
    post = sharing.find_post(posts, post_id)
    return jsonify({"ok": True, "comment": sharing.find_comment(post, comment_id)})


@bp.post("/publish")
def publish_trip():
    data = _body()
    trip = current_app.trip_store.load()  # type: ignore[attr-defined]
    post = sharing.publish_trip(
        trip,
        title=data.get("title"),
        author=data.get("author"),
        category=data.get("category"),
        tags=data.get("tags"),
    )
    store = _store()
    store.save(sharing.add_post(store.load(), post))
    log.info("Published trip summary as post %s", post["id"])
    return jsonify({"ok": True, "post": post}), 201
