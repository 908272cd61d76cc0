"""
Redis implementation of ChunkStore

Layout per (db, root):
  {db}:{root}.files           set of file ids
  {db}:{root}.files:{id}      FileDocument as JSON
  {db}:{root}.chunks:{id}     hash of chunk index -> chunk bytes
"""
import logging
from typing import Dict, List, Optional
from uuid import UUID
from redis.asyncio import Redis, ConnectionPool

from errors import StoreError
from .interface import ChunkStore
from .models import FileDocument

logger = logging.getLogger(__name__)


class RedisChunkStore(ChunkStore):
    """Redis-based chunk store"""

    def __init__(self, redis_url: str, pool_size: Optional[int] = None):
        self.redis_url = redis_url
        self._pool = ConnectionPool.from_url(redis_url, decode_responses=False, max_connections=pool_size or 100)
        self._redis: Redis = Redis(connection_pool=self._pool)

    @classmethod
    def from_config(cls, config) -> "RedisChunkStore":
        return cls(config.redis.url, pool_size=config.redis.pool_size)

    async def close(self):
        """Cleanup connections"""
        await self._redis.aclose()
        await self._pool.disconnect()

    def _index_key(self, db: str, root: str) -> str:
        return f"{db}:{root}.files"

    def _document_key(self, db: str, root: str, file_id: UUID) -> str:
        return f"{db}:{root}.files:{file_id}"

    def _chunks_key(self, db: str, root: str, file_id: UUID) -> str:
        return f"{db}:{root}.chunks:{file_id}"

    def _decode(self, raw: bytes) -> FileDocument:
        try:
            return FileDocument.model_validate_json(raw)
        except ValueError as e:
            raise StoreError("Corrupted file document", e)

    async def load_document(self, db: str, root: str, file_id: UUID) -> Optional[FileDocument]:
        raw = await self._redis.get(self._document_key(db, root, file_id))
        if raw is None:
            return None
        return self._decode(raw)

    async def save_document(self, db: str, root: str, doc: FileDocument) -> None:
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.set(self._document_key(db, root, doc.id), doc.model_dump_json())
            pipe.sadd(self._index_key(db, root), str(doc.id))
            await pipe.execute()

    async def read_chunk(self, db: str, root: str, file_id: UUID, index: int) -> Optional[bytes]:
        return await self._redis.hget(self._chunks_key(db, root, file_id), str(index))

    async def write_chunks(self, db: str, root: str, file_id: UUID, chunks: Dict[int, bytes]) -> None:
        if not chunks:
            return
        mapping = {str(index): data for index, data in chunks.items()}
        await self._redis.hset(self._chunks_key(db, root, file_id), mapping=mapping)

    async def delete_file(self, db: str, root: str, file_id: UUID) -> None:
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.delete(self._document_key(db, root, file_id), self._chunks_key(db, root, file_id))
            pipe.srem(self._index_key(db, root), str(file_id))
            await pipe.execute()

    async def list_documents(self, db: str, root: str) -> List[FileDocument]:
        members = await self._redis.smembers(self._index_key(db, root))
        if not members:
            return []

        ids = [m.decode("utf-8") if isinstance(m, bytes) else m for m in members]
        keys = [self._document_key(db, root, file_id) for file_id in ids]
        values = await self._redis.mget(keys)

        docs = []
        for file_id, raw in zip(ids, values):
            if raw is None:
                logger.warning(f"Index entry {file_id} in {db}/{root} has no document")
                continue
            docs.append(self._decode(raw))
        return docs
