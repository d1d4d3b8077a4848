"""Create and edit flows on top of :class:`PostStore`."""
from __future__ import annotations

import logging
import secrets
import time
from typing import Optional

from .errors import NotFoundError, UnauthorizedError
from .ids import generate_edit_id, generate_post_id
from .models import Post, PostCreate, PostUpdate
from .storage import PostStore
from .validation import require_edit_id, require_post_id, validate_new_post, validate_updates

logger = logging.getLogger(__name__)

DEFAULT_POST = {
    "alias": "MexicanSnowboarder",
    "avatar": "\U0001F3C2",
    "content": "Just hit the slopes! Fresh powder today! \U0001F3D4\ufe0f",
}


def now_ms() -> int:
    return int(time.time() * 1000)


def create_post(store: PostStore, data: PostCreate, now: Optional[int] = None) -> Post:
    """Validate and store a new post.

    The returned post carries the edit code; this is the only response that
    hands it to the author.
    """
    fields = validate_new_post(data)
    post = Post(
        id=generate_post_id(),
        alias=fields["alias"],
        avatar=fields["avatar"],
        content=fields["content"],
        timestamp=now if now is not None else now_ms(),
        editId=fields["editId"] or generate_edit_id(),
    )
    return store.set(post)


def edit_post(
    store: PostStore,
    post_id: str,
    edit_id: Optional[str],
    updates: PostUpdate,
    now: Optional[int] = None,
) -> Post:
    require_post_id(post_id)
    require_edit_id(edit_id)

    existing = store.get(post_id)
    if existing is None:
        raise NotFoundError("Post not found")
    if not secrets.compare_digest(existing.editId, edit_id):
        raise UnauthorizedError("Invalid edit ID")

    changes = validate_updates(updates)
    timestamp = now if now is not None else now_ms()
    updated = existing.model_copy(update={
        **changes,
        "id": existing.id,
        "editId": existing.editId,
        "timestamp": max(timestamp, existing.timestamp),
    })
    return store.update(post_id, updated)


def seed_default_post(store: PostStore) -> Optional[Post]:
    """Put the welcome post on an empty wall."""
    try:
        existing = store.list()
        if existing:
            logger.info("found %d existing posts, skipping default post", len(existing))
            return None
        post = create_post(store, PostCreate(**DEFAULT_POST))
    except Exception:
        logger.exception("failed to initialize default post")
        return None
    logger.info("created default post %s", post.id)
    return post
