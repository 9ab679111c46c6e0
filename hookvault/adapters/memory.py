"""In-memory key-value store."""
import base64
import binascii
import time
from bisect import bisect_right
from typing import Callable, NamedTuple

import structlog

from .base import KVStore, MAX_LIST_LIMIT, clamp_list_limit
from ..errors import StoreUnavailable
from ..event_models import ListPage

log = structlog.get_logger()


class _Entry(NamedTuple):
    value: str
    expires_at: float | None


def encode_cursor(key: str) -> str:
    return base64.urlsafe_b64encode(key.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> str:
    try:
        return base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise StoreUnavailable(f"Invalid cursor: {cursor!r}") from e


class InMemoryStore(KVStore):
    """
    Dict-backed store with lexicographic listing and lazy TTL expiry.

    Writes are visible to listings immediately, which makes it the
    deterministic backend for tests and single-process deployments.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._data: dict[str, _Entry] = {}
        self._clock = clock

    def _expired(self, entry: _Entry) -> bool:
        return entry.expires_at is not None and entry.expires_at <= self._clock()

    def _purge(self) -> None:
        for key in [k for k, e in self._data.items() if self._expired(e)]:
            del self._data[key]

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        expires_at = None
        if ttl_seconds is not None and ttl_seconds > 0:
            expires_at = self._clock() + ttl_seconds
        self._data[key] = _Entry(value, expires_at)
        log.debug("store.put", key=key, ttl_seconds=ttl_seconds, adapter="memory")

    async def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if self._expired(entry):
            del self._data[key]
            return None
        return entry.value

    async def list(
        self, prefix: str = "", cursor: str | None = None, limit: int = MAX_LIST_LIMIT
    ) -> ListPage:
        self._purge()
        limit = clamp_list_limit(limit)
        matching = sorted(k for k in self._data if k.startswith(prefix))
        start = bisect_right(matching, decode_cursor(cursor)) if cursor else 0
        page = matching[start:start + limit]
        if start + limit < len(matching):
            return ListPage(
                keys=page, cursor=encode_cursor(page[-1]), list_complete=False, examined=len(page)
            )
        return ListPage(keys=page, examined=len(page))

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def health_check(self) -> bool:
        """In-memory store is always healthy."""
        return True

    def __len__(self) -> int:
        self._purge()
        return len(self._data)
