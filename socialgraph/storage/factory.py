"""
Storage backend factory — picks the adapter named by `storage_backend`.
"""
import logging

from socialgraph.config import settings
from socialgraph.storage.memory import MemoryStore
from socialgraph.storage.port import StoragePort
from socialgraph.storage.redis_store import RedisStore

logger = logging.getLogger(__name__)


async def create_store(backend: str | None = None) -> StoragePort:
    backend = (backend or settings.storage_backend).lower()
    if backend == "memory":
        logger.warning("Using in-memory storage — data is lost on restart")
        return MemoryStore()
    if backend == "redis":
        return await RedisStore.connect()
    raise ValueError(f"Unknown storage backend: {backend}")
