"""Redis key-value store adapter."""
import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from .base import KVStore, MAX_LIST_LIMIT, clamp_list_limit
from .memory import decode_cursor, encode_cursor
from ..errors import StoreUnavailable
from ..event_models import ListPage

log = structlog.get_logger()


class RedisKVStore(KVStore):
    """Redis implementation of the key-value store.

    Values live at ``<prefix>event:<key>`` with a native TTL. Every key is
    also a member of the sorted set ``<prefix>index`` (score 0), which gives
    lexicographic prefix listing through ZRANGEBYLEX. Index members whose
    value has expired are pruned while listing.
    """

    def __init__(self, redis_url: str, key_prefix: str = "hookvault:"):
        """
        Initialize Redis store.

        Args:
            redis_url: Redis connection URL
            key_prefix: Prefix applied to every Redis key this store owns
        """
        self.redis_url = redis_url
        self._client: Redis | None = None
        self._value_prefix = f"{key_prefix}event:"
        self._index_key = f"{key_prefix}index"

    def _get_client(self) -> Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = Redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
        return self._client

    def _value_key(self, key: str) -> str:
        return f"{self._value_prefix}{key}"

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        ex = ttl_seconds if ttl_seconds is not None and ttl_seconds > 0 else None
        try:
            pipe = self._get_client().pipeline(transaction=False)
            pipe.set(self._value_key(key), value, ex=ex)
            pipe.zadd(self._index_key, {key: 0})
            await pipe.execute()
        except RedisError as e:
            log.error("redis.put_failed", error=str(e), key=key)
            raise StoreUnavailable(f"Failed to write {key}: {e}") from e

    async def get(self, key: str) -> str | None:
        try:
            return await self._get_client().get(self._value_key(key))
        except RedisError as e:
            log.error("redis.get_failed", error=str(e), key=key)
            raise StoreUnavailable(f"Failed to read {key}: {e}") from e

    async def list(
        self, prefix: str = "", cursor: str | None = None, limit: int = MAX_LIST_LIMIT
    ) -> ListPage:
        limit = clamp_list_limit(limit)
        if cursor:
            lower = b"(" + decode_cursor(cursor).encode("utf-8")
        elif prefix:
            lower = b"[" + prefix.encode("utf-8")
        else:
            lower = b"-"
        # 0xff never occurs in UTF-8, so it bounds every key sharing the prefix
        upper = b"[" + prefix.encode("utf-8") + b"\xff" if prefix else b"+"

        try:
            client = self._get_client()
            # One extra member tells us whether another page exists
            members = await client.zrangebylex(self._index_key, lower, upper, start=0, num=limit + 1)
            members = [m for m in members if m.startswith(prefix)]
            has_more = len(members) > limit
            members = members[:limit]

            live = members
            if members:
                pipe = client.pipeline(transaction=False)
                for member in members:
                    pipe.exists(self._value_key(member))
                flags = await pipe.execute()
                live = [m for m, present in zip(members, flags) if present]
                stale = [m for m, present in zip(members, flags) if not present]
                if stale:
                    await client.zrem(self._index_key, *stale)
                    log.debug("redis.index_pruned", count=len(stale))
        except RedisError as e:
            log.error("redis.list_failed", error=str(e), prefix=prefix)
            raise StoreUnavailable(f"Failed to list keys: {e}") from e

        if has_more:
            return ListPage(
                keys=live,
                cursor=encode_cursor(members[-1]),
                list_complete=False,
                examined=len(members),
            )
        return ListPage(keys=live, examined=len(members))

    async def delete(self, key: str) -> None:
        try:
            pipe = self._get_client().pipeline(transaction=False)
            pipe.delete(self._value_key(key))
            pipe.zrem(self._index_key, key)
            await pipe.execute()
        except RedisError as e:
            log.error("redis.delete_failed", error=str(e), key=key)
            raise StoreUnavailable(f"Failed to delete {key}: {e}") from e

    async def health_check(self) -> bool:
        """
        Check Redis connection health.

        Returns:
            True if Redis is accessible, False otherwise
        """
        try:
            return bool(await self._get_client().ping())
        except Exception as e:
            log.warning("redis.health_check_failed", error=str(e))
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
