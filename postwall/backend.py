"""Key-value backends the post store is built on.

Both implementations follow Redis semantics for the handful of commands the
store needs: string get/set/delete/exists plus LPUSH, LRANGE and LREM on lists.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import redis

from .errors import BackendError

logger = logging.getLogger(__name__)

POST_IDS_KEY = "postIds"


def post_key(post_id: str) -> str:
    return f"post:{post_id}"


class KeyValueBackend(ABC):

    @abstractmethod
    def get(self, key: str) -> Optional[str]: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def exists(self, key: str) -> bool: ...

    @abstractmethod
    def lpush(self, key: str, *values: str) -> int:
        """Push values to the head of the list, returning its new length."""

    @abstractmethod
    def lrange(self, key: str, start: int, stop: int) -> List[str]:
        """Inclusive range read; ``stop == -1`` reads to the end."""

    @abstractmethod
    def lrem(self, key: str, count: int, value: str) -> int:
        """Remove up to ``count`` occurrences of value from the head side."""

    def ping(self) -> bool:
        return True


class InMemoryBackend(KeyValueBackend):
    """Process-local backend. Not thread safe; last write wins."""

    def __init__(self) -> None:
        self._strings: Dict[str, str] = {}
        self._lists: Dict[str, List[str]] = {}

    def _check_type(self, key: str, expected: dict) -> None:
        other = self._lists if expected is self._strings else self._strings
        if key in other:
            raise BackendError(f"WRONGTYPE operation against key {key!r}")

    def get(self, key: str) -> Optional[str]:
        self._check_type(key, self._strings)
        return self._strings.get(key)

    def set(self, key: str, value: str) -> None:
        self._lists.pop(key, None)
        self._strings[key] = value

    def delete(self, key: str) -> None:
        self._strings.pop(key, None)
        self._lists.pop(key, None)

    def exists(self, key: str) -> bool:
        return key in self._strings or key in self._lists

    def lpush(self, key: str, *values: str) -> int:
        self._check_type(key, self._lists)
        items = self._lists.setdefault(key, [])
        for value in values:
            items.insert(0, value)
        return len(items)

    def lrange(self, key: str, start: int, stop: int) -> List[str]:
        self._check_type(key, self._lists)
        items = self._lists.get(key, [])
        end = None if stop == -1 else stop + 1
        return list(items[start:end])

    def lrem(self, key: str, count: int, value: str) -> int:
        self._check_type(key, self._lists)
        items = self._lists.get(key)
        if not items:
            return 0
        positions = [i for i, item in enumerate(items) if item == value]
        if count < 0:
            positions.reverse()
        doomed = positions[:abs(count) or len(positions)]
        for i in sorted(doomed, reverse=True):
            del items[i]
        if not items:
            del self._lists[key]
        return len(doomed)


class RedisBackend(KeyValueBackend):
    """Adapter over a ``redis.Redis`` client. Redis errors become BackendError."""

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisBackend":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def _call(self, command: str, *args):
        try:
            return getattr(self.client, command)(*args)
        except redis.RedisError as e:
            logger.error("redis %s failed: %s", command, e)
            raise BackendError(str(e)) from e

    def get(self, key: str) -> Optional[str]:
        return self._call("get", key)

    def set(self, key: str, value: str) -> None:
        self._call("set", key, value)

    def delete(self, key: str) -> None:
        self._call("delete", key)

    def exists(self, key: str) -> bool:
        return self._call("exists", key) > 0

    def lpush(self, key: str, *values: str) -> int:
        return self._call("lpush", key, *values)

    def lrange(self, key: str, start: int, stop: int) -> List[str]:
        return self._call("lrange", key, start, stop)

    def lrem(self, key: str, count: int, value: str) -> int:
        return self._call("lrem", key, count, value)

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            logger.warning("redis ping failed: %s", e)
            return False
