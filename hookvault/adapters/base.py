"""Base interface for key-value store backends."""
from abc import ABC, abstractmethod
from ..event_models import ListPage

MAX_LIST_LIMIT = 1000


def clamp_list_limit(limit: int) -> int:
    return max(1, min(MAX_LIST_LIMIT, limit))


class KVStore(ABC):
    """
    Abstract interface over an eventually-consistent key-value backend.

    Implementations raise ``StoreUnavailable`` for any backend failure.
    Listings may lag behind writes; callers must not assume
    read-after-write visibility.
    """

    @abstractmethod
    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """
        Unconditionally write a value.

        Args:
            key: Storage key
            value: Serialized value
            ttl_seconds: If positive, the backend may drop the key no earlier
                than this many seconds from now
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        pass

    @abstractmethod
    async def list(
        self, prefix: str = "", cursor: str | None = None, limit: int = MAX_LIST_LIMIT
    ) -> ListPage:
        """
        List keys starting with ``prefix`` in lexicographic order.

        Args:
            prefix: Key prefix filter ("" lists everything)
            cursor: Opaque continuation token from a previous page
            limit: Maximum keys to return, clamped to [1, 1000]

        Returns:
            Page of keys; ``cursor`` is set iff more keys remain
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Deleting an absent key is not an error."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the backend is reachable.

        Returns:
            True if backend is healthy, False otherwise
        """
        pass

    async def close(self) -> None:
        """Release backend resources."""
        pass
