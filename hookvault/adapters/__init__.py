"""Key-value store backends."""

from .base import KVStore
from .memory import InMemoryStore
from .redis_kv import RedisKVStore

__all__ = ["KVStore", "InMemoryStore", "RedisKVStore"]
