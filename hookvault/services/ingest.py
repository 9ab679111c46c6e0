"""Webhook ingestion pipeline: gate, validate, encode, persist."""
from datetime import datetime, timezone

import structlog
from pydantic import ValidationError

from .gate import NamespaceGate
from ..adapters.base import KVStore
from ..errors import PayloadTooLarge
from ..event_models import EventRecord
from ..keys import encode_key, generate_event_id
from ..validation import parse_payload, validate_payload

log = structlog.get_logger()


class IngestService:
    def __init__(
        self,
        store: KVStore,
        gate: NamespaceGate,
        ttl_seconds: int | None = None,
        max_event_size: int | None = None,
    ):
        self._store = store
        self._gate = gate
        self.ttl_seconds = ttl_seconds
        self.max_event_size = max_event_size

    async def ingest(self, namespace: str, raw_body: bytes) -> EventRecord:
        """
        Persist one webhook body under ``namespace``.

        Nothing is written unless the namespace is allowed and the body is a
        flat JSON object.

        Raises:
            ForbiddenNamespace, PayloadTooLarge, InvalidJson, NotObject,
            NestedValue, InvalidNamespace, StoreUnavailable
        """
        self._gate.check(namespace)
        if self.max_event_size is not None and len(raw_body) > self.max_event_size:
            raise PayloadTooLarge(len(raw_body), self.max_event_size)
        body = validate_payload(parse_payload(raw_body))

        now = datetime.now(timezone.utc)
        record = EventRecord(
            id=generate_event_id(now),
            namespace=namespace,
            received_at=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            body=body,
        )
        key = encode_key(namespace, record.id)
        await self._store.put(key, record.model_dump_json(by_alias=True), ttl_seconds=self.ttl_seconds)

        log.info("event.ingested", id=record.id, namespace=namespace, fields=len(body))
        return record

    async def get_event(self, namespace: str, event_id: str) -> EventRecord | None:
        key = encode_key(namespace, event_id)
        raw = await self._store.get(key)
        if raw is None:
            return None
        try:
            return EventRecord.model_validate_json(raw)
        except ValidationError as e:
            log.warning("event.undecodable", key=key, error=str(e))
            return None
