"""Paginated event listing within one namespace."""
import asyncio

import structlog
from pydantic import ValidationError

from ..adapters.base import KVStore, MAX_LIST_LIMIT
from ..event_models import EventPage, EventRecord
from ..keys import DELIMITER

log = structlog.get_logger()

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 200
DEFAULT_PAGE_SIZE = 50


def clamp_page_size(limit: int) -> int:
    return max(MIN_PAGE_SIZE, min(MAX_PAGE_SIZE, limit))


class ListingService:
    """
    Lists events stored under ``<namespace>:``.

    Keys come back in lexicographic order, which is chronological for
    generated ids. Records that vanish between the key listing and the
    value fetch are dropped; ``cursor`` and ``list_complete`` still describe
    the key page, so a page may hold fewer events than keys listed.
    """

    def __init__(self, store: KVStore):
        self._store = store

    async def list_events(
        self, namespace: str, limit: int = DEFAULT_PAGE_SIZE, cursor: str | None = None
    ) -> EventPage:
        limit = clamp_page_size(limit)
        page = await self._store.list(
            prefix=f"{namespace}{DELIMITER}",
            cursor=cursor,
            limit=min(MAX_LIST_LIMIT, limit),
        )
        values = await asyncio.gather(*(self._store.get(key) for key in page.keys))

        events = []
        for key, raw in zip(page.keys, values):
            if raw is None:
                continue
            try:
                events.append(EventRecord.model_validate_json(raw))
            except ValidationError as e:
                log.warning("event.undecodable", key=key, error=str(e))

        dropped = len(page.keys) - len(events)
        if dropped:
            log.debug("events.dropped", namespace=namespace, count=dropped)
        return EventPage(events=events, cursor=page.cursor, list_complete=page.list_complete)
