"""Bounded concurrent batch deletion."""
import asyncio
from typing import Sequence

import structlog

from ..adapters.base import KVStore
from ..errors import StoreUnavailable
from ..keys import encode_key

log = structlog.get_logger()

MAX_DELETE_IDS = 500


class BatchDeleter:
    """
    Deletes up to MAX_DELETE_IDS events of one namespace concurrently.

    Ids past the cap are ignored. The returned count is the number of
    delete calls issued, not confirmed removals. A failing call does not
    stop the others; any failure is reported once, as StoreUnavailable,
    after every call has finished.
    """

    def __init__(self, store: KVStore):
        self._store = store

    async def delete_events(self, namespace: str, ids: Sequence[str]) -> int:
        limited = list(ids[:MAX_DELETE_IDS])
        if len(ids) > MAX_DELETE_IDS:
            log.info("events.delete_truncated", requested=len(ids), kept=MAX_DELETE_IDS)
        keys = [encode_key(namespace, event_id) for event_id in limited]

        results = await asyncio.gather(
            *(self._store.delete(key) for key in keys), return_exceptions=True
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            log.error(
                "events.delete_failed",
                namespace=namespace,
                attempted=len(keys),
                failed=len(failures),
                error=str(failures[0]),
            )
            raise StoreUnavailable(f"{len(failures)} of {len(keys)} deletes failed")

        log.info("events.deleted", namespace=namespace, count=len(keys))
        return len(keys)
