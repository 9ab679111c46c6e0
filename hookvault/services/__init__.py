"""
Webhook storage services

Components composed by the HTTP layer:
- Namespace allowlist gate
- Ingestion (validation, key encoding, retention TTL)
- Cursor-paginated listing
- Best-effort namespace discovery
- Bounded batch deletion
"""

from .deleter import BatchDeleter, MAX_DELETE_IDS
from .gate import NamespaceGate
from .ingest import IngestService
from .listing import ListingService
from .namespaces import NamespaceScanner
from .webhooks import WebhookService, create_store

__all__ = [
    "BatchDeleter",
    "MAX_DELETE_IDS",
    "NamespaceGate",
    "IngestService",
    "ListingService",
    "NamespaceScanner",
    "WebhookService",
    "create_store",
]
