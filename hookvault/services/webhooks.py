"""Webhook service facade over a pluggable key-value backend."""
from typing import Sequence

import structlog

from .deleter import BatchDeleter
from .gate import NamespaceGate
from .ingest import IngestService
from .listing import ListingService
from .namespaces import NamespaceScanner
from ..adapters.base import KVStore
from ..adapters.memory import InMemoryStore
from ..adapters.redis_kv import RedisKVStore
from ..config import Settings
from ..errors import HookVaultError, StoreUnavailable
from ..event_models import EventPage, EventRecord, NamespaceScan
from ..metrics import Metrics

log = structlog.get_logger()


class WebhookService:
    """
    Composes the gate, ingestion, listing, discovery and deletion
    components around one store.

    Read paths (``list_events``, ``list_namespaces``) degrade to an empty
    result carrying the backend error; write and delete paths raise.
    """

    def __init__(
        self,
        store: KVStore,
        gate: NamespaceGate | None = None,
        ttl_seconds: int | None = None,
        max_event_size: int | None = None,
        scan_cap: int = 2000,
        metrics: Metrics | None = None,
    ):
        self.store = store
        self.gate = gate or NamespaceGate()
        self.metrics = metrics
        self.ingestor = IngestService(store, self.gate, ttl_seconds, max_event_size)
        self.listing = ListingService(store)
        self.scanner = NamespaceScanner(store, scan_cap)
        self.deleter = BatchDeleter(store)

    @classmethod
    def from_settings(
        cls, settings: Settings, store: KVStore | None = None, metrics: Metrics | None = None
    ) -> "WebhookService":
        return cls(
            store=store if store is not None else create_store(settings),
            gate=NamespaceGate(settings.allowlist),
            ttl_seconds=settings.retention_ttl_seconds,
            max_event_size=settings.MAX_EVENT_SIZE,
            scan_cap=settings.NAMESPACE_SCAN_CAP,
            metrics=metrics,
        )

    async def ingest(self, namespace: str, raw_body: bytes) -> EventRecord:
        try:
            record = await self.ingestor.ingest(namespace, raw_body)
        except StoreUnavailable:
            self._store_error("put")
            raise
        except HookVaultError as e:
            if self.metrics:
                self.metrics.record_rejected(e.code)
            raise
        if self.metrics:
            self.metrics.record_ingested(len(raw_body))
        return record

    async def get_event(self, namespace: str, event_id: str) -> EventRecord | None:
        self.gate.check(namespace)
        return await self.ingestor.get_event(namespace, event_id)

    async def list_events(
        self, namespace: str, limit: int, cursor: str | None = None
    ) -> EventPage:
        self.gate.check(namespace)
        try:
            return await self.listing.list_events(namespace, limit, cursor)
        except StoreUnavailable as e:
            self._store_error("list")
            log.warning("events.list_degraded", namespace=namespace, error=e.message)
            return EventPage(events=[], list_complete=True, error=e.message)

    async def list_namespaces(self) -> NamespaceScan:
        try:
            scan = await self.scanner.list_namespaces()
        except StoreUnavailable as e:
            self._store_error("scan")
            log.warning("namespaces.scan_degraded", error=e.message)
            return NamespaceScan(error=e.message)
        if self.metrics:
            self.metrics.namespace_scan_keys.observe(scan.scanned)
        return scan

    async def delete_events(self, namespace: str, ids: Sequence[str]) -> int:
        self.gate.check(namespace)
        try:
            deleted = await self.deleter.delete_events(namespace, ids)
        except StoreUnavailable:
            self._store_error("delete")
            raise
        if self.metrics:
            self.metrics.events_deleted_total.inc(deleted)
        return deleted

    async def health_check(self) -> bool:
        return await self.store.health_check()

    async def close(self) -> None:
        await self.store.close()

    def _store_error(self, operation: str) -> None:
        if self.metrics:
            self.metrics.record_store_error(operation)


def create_store(settings: Settings) -> KVStore:
    """
    Create the store backend selected by STORE_ADAPTER.

    Returns:
        KVStore instance; memory when redis is requested without REDIS_URL
    """
    if settings.STORE_ADAPTER == "redis":
        if not settings.REDIS_URL:
            log.warning(
                "adapter.fallback",
                requested="redis",
                actual="memory",
                reason="REDIS_URL not configured"
            )
            return InMemoryStore()

        log.info("adapter.selected", type="redis", url=str(settings.REDIS_URL))
        return RedisKVStore(str(settings.REDIS_URL), key_prefix=settings.REDIS_KEY_PREFIX)
    else:
        log.info("adapter.selected", type="memory")
        return InMemoryStore()
