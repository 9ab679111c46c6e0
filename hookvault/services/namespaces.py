"""Best-effort discovery of namespaces present in the store."""
import structlog

from ..adapters.base import KVStore, MAX_LIST_LIMIT
from ..event_models import NamespaceScan
from ..keys import NO_KEY, namespace_of

log = structlog.get_logger()

DEFAULT_SCAN_CAP = 2000


class NamespaceScanner:
    """
    Enumerates distinct namespaces by walking the full key listing.

    The walk stops after ``scan_cap`` keys have been examined, live or
    expired, so a namespace whose first key lies beyond the cap is not
    discovered. ``NamespaceScan.truncated`` tells callers when that happened.
    NO-KEY is never reported.
    """

    def __init__(self, store: KVStore, scan_cap: int = DEFAULT_SCAN_CAP):
        self._store = store
        self.scan_cap = scan_cap

    async def list_namespaces(self) -> NamespaceScan:
        distinct: set[str] = set()
        scanned = 0
        cursor = None
        complete = False

        while scanned < self.scan_cap:
            page = await self._store.list(
                cursor=cursor, limit=min(MAX_LIST_LIMIT, self.scan_cap - scanned)
            )
            # Expired entries a backend skipped still count against the cap
            scanned += page.examined if page.examined is not None else len(page.keys)
            for key in page.keys:
                namespace = namespace_of(key)
                if namespace and namespace != NO_KEY:
                    distinct.add(namespace)
            if page.list_complete:
                complete = True
                break
            cursor = page.cursor

        if not complete:
            log.info("namespaces.scan_truncated", scanned=scanned, scan_cap=self.scan_cap)
        return NamespaceScan(namespaces=sorted(distinct), scanned=scanned, truncated=not complete)
