from .models import FileDocument, FileOptions, DEFAULT_CHUNK_SIZE, DEFAULT_CONTENT_TYPE
from .interface import ChunkStore, GridFile, READ_MODES, WRITE_MODES
from .stream import GridReadStream, GridWriteStream
from .memory_backend import MemoryChunkStore
from .redis_backend import RedisChunkStore

from errors import ConfigError


def create_store(config) -> ChunkStore:
    """Build the backend named by config.store.backend"""
    backend = config.store.backend.lower()
    if backend == "memory":
        return MemoryChunkStore()
    if backend == "redis":
        return RedisChunkStore.from_config(config)
    raise ConfigError(f"Unknown store backend {config.store.backend!r}")


__all__ = [
    'FileDocument',
    'FileOptions',
    'DEFAULT_CHUNK_SIZE',
    'DEFAULT_CONTENT_TYPE',
    'ChunkStore',
    'GridFile',
    'READ_MODES',
    'WRITE_MODES',
    'GridReadStream',
    'GridWriteStream',
    'MemoryChunkStore',
    'RedisChunkStore',
    'create_store',
]
