from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from .backend import POST_IDS_KEY, KeyValueBackend, post_key
from .errors import BackendError, BackendFailure
from .models import Post

logger = logging.getLogger(__name__)


def sort_newest_first(posts: List[Post]) -> List[Post]:
    return sorted(posts, key=lambda p: p.timestamp, reverse=True)


def dump_post(post: Post) -> str:
    return post.model_dump_json()


def load_post(raw: str) -> Post:
    return Post.model_validate_json(raw)


@dataclass
class PostStore:
    """Posts on top of a key-value backend.

    Each post lives at ``post:<id>`` as JSON; ``postIds`` holds every id,
    most recently created first. ``set`` is the only writer of the index, so
    an id enters it exactly once, on the first write of its record.
    """
    backend: KeyValueBackend

    # ----- READ -----
    def list(self) -> List[Post]:
        try:
            post_ids = self.backend.lrange(POST_IDS_KEY, 0, -1)
        except BackendError:
            logger.exception("failed to read post index")
            raise BackendFailure("Failed to retrieve posts")

        posts: List[Post] = []
        for post_id in post_ids:
            try:
                raw = self.backend.get(post_key(post_id))
            except BackendError:
                logger.exception("failed to read post %s", post_id)
                continue
            if raw is None:
                logger.warning("post %s is indexed but has no record", post_id)
                continue
            try:
                posts.append(load_post(raw))
            except (PydanticValidationError, ValueError):
                logger.error("skipping corrupt post %s", post_id)
        return sort_newest_first(posts)

    def get(self, post_id: str) -> Optional[Post]:
        try:
            raw = self.backend.get(post_key(post_id))
            if raw is None:
                return None
            return load_post(raw)
        except (BackendError, PydanticValidationError, ValueError):
            logger.exception("failed to get post %s", post_id)
            return None

    def exists(self, post_id: str) -> bool:
        try:
            return self.backend.exists(post_key(post_id))
        except BackendError:
            logger.exception("failed to check post %s", post_id)
            return False

    # ----- WRITE -----
    def set(self, post: Post) -> Post:
        is_new = False
        try:
            is_new = not self.backend.exists(post_key(post.id))
            self.backend.set(post_key(post.id), dump_post(post))
            if is_new:
                self.backend.lpush(POST_IDS_KEY, post.id)
        except BackendError:
            logger.exception("failed to save post %s", post.id)
            if is_new:
                # a new record must not outlive a failed index push
                self._undo(self.backend.delete, post_key(post.id))
            raise BackendFailure("Failed to save post")
        return post

    def update(self, post_id: str, post: Post) -> Post:
        try:
            self.backend.set(post_key(post_id), dump_post(post))
        except BackendError:
            logger.exception("failed to update post %s", post_id)
            raise BackendFailure("Failed to update post")
        return post

    def delete(self, post_id: str) -> bool:
        try:
            raw = self.backend.get(post_key(post_id))
        except BackendError:
            logger.exception("failed to read post %s", post_id)
            return False
        if raw is None:
            return False
        try:
            self.backend.delete(post_key(post_id))
        except BackendError:
            logger.exception("failed to delete post %s", post_id)
            return False
        try:
            self.backend.lrem(POST_IDS_KEY, 1, post_id)
        except BackendError:
            logger.exception("failed to unindex post %s", post_id)
            self._undo(self.backend.set, post_key(post_id), raw)
            return False
        return True

    def _undo(self, action, *args) -> None:
        try:
            action(*args)
        except BackendError:
            logger.exception("rollback %s%r failed", action.__name__, args)
