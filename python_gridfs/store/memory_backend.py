from collections import defaultdict
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from .interface import ChunkStore
from .models import FileDocument


class MemoryChunkStore(ChunkStore):
    """
    In-memory implementation of ChunkStore.
    Useful for local development and testing without Redis.
    """
    def __init__(self):
        # {(db, root): {file_id: FileDocument}}
        self._documents: Dict[Tuple[str, str], Dict[UUID, FileDocument]] = defaultdict(dict)
        # {(db, root, file_id): {index: bytes}}
        self._chunks: Dict[Tuple[str, str, UUID], Dict[int, bytes]] = defaultdict(dict)

    async def load_document(self, db: str, root: str, file_id: UUID) -> Optional[FileDocument]:
        doc = self._documents.get((db, root), {}).get(file_id)
        return doc.model_copy(deep=True) if doc is not None else None

    async def save_document(self, db: str, root: str, doc: FileDocument) -> None:
        self._documents[(db, root)][doc.id] = doc.model_copy(deep=True)

    async def read_chunk(self, db: str, root: str, file_id: UUID, index: int) -> Optional[bytes]:
        return self._chunks.get((db, root, file_id), {}).get(index)

    async def write_chunks(self, db: str, root: str, file_id: UUID, chunks: Dict[int, bytes]) -> None:
        self._chunks[(db, root, file_id)].update(chunks)

    async def delete_file(self, db: str, root: str, file_id: UUID) -> None:
        self._documents.get((db, root), {}).pop(file_id, None)
        self._chunks.pop((db, root, file_id), None)

    async def list_documents(self, db: str, root: str) -> List[FileDocument]:
        return [doc.model_copy(deep=True) for doc in self._documents.get((db, root), {}).values()]
