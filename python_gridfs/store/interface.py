"""
Chunk Store - Abstract interface for chunked binary object storage.

A file is a FileDocument plus a run of fixed-size chunks, both scoped by
(db, root). Backends only provide the storage primitives; GridFile holds the
sequential read/write/seek logic on top of them.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Union
from uuid import UUID
from uuid6 import uuid7

from errors import FileNotFound, InvalidFileId, ModeError, SeekError, StoreError
from .models import DEFAULT_CHUNK_SIZE, DEFAULT_CONTENT_TYPE, FileDocument, FileOptions, utc_now

logger = logging.getLogger(__name__)

READ_MODES = frozenset({"r"})
WRITE_MODES = frozenset({"w", "w+"})

FileId = Union[UUID, str]


class ChunkStore(ABC):
    """
    Abstract backend for chunked file storage.
    Store-level operations (exist/list/unlink) are built on the primitives.
    """

    default_root = "fs"

    def object_id(self, value: FileId) -> UUID:
        """Normalize an identifier or its string form to the native UUID"""
        if isinstance(value, UUID):
            return value
        if isinstance(value, str):
            try:
                return UUID(value)
            except ValueError as e:
                raise InvalidFileId(f"Invalid file id {value!r}", e)
        raise InvalidFileId(f"Invalid file id of type {type(value).__name__}")

    def new_id(self) -> UUID:
        return uuid7()

    def file(
        self,
        db: str,
        file_id: FileId,
        filename: Optional[str] = None,
        mode: str = "r",
        options: Union[FileOptions, Mapping[str, Any], None] = None,
    ) -> "GridFile":
        """Build an unopened handle; call open() on it before use"""
        if not isinstance(options, FileOptions):
            options = FileOptions.model_validate(dict(options or {}))
        oid = self.object_id(file_id)
        return GridFile(self, db, oid, filename or str(oid), mode, options)

    async def exist(self, db: str, file_id: FileId, root: Optional[str] = None) -> bool:
        doc = await self.load_document(db, root or self.default_root, self.object_id(file_id))
        return doc is not None

    async def list(self, db: str, root: Optional[str] = None) -> List[str]:
        docs = await self.list_documents(db, root or self.default_root)
        return sorted(doc.filename for doc in docs)

    async def unlink(self, db: str, file_id: FileId, root: Optional[str] = None) -> None:
        """Delete a file; deleting a missing file is not an error"""
        oid = self.object_id(file_id)
        await self.delete_file(db, root or self.default_root, oid)
        logger.debug(f"Deleted {oid} from {db}/{root or self.default_root}", extra={"file_id": oid})

    async def close(self) -> None:
        """Release backend connections"""
        pass

    @abstractmethod
    async def load_document(self, db: str, root: str, file_id: UUID) -> Optional[FileDocument]:
        """Get the document of a file, None if it does not exist"""
        pass

    @abstractmethod
    async def save_document(self, db: str, root: str, doc: FileDocument) -> None:
        """Insert or replace the document of a file"""
        pass

    @abstractmethod
    async def read_chunk(self, db: str, root: str, file_id: UUID, index: int) -> Optional[bytes]:
        """Get one chunk, None if it was never written"""
        pass

    @abstractmethod
    async def write_chunks(self, db: str, root: str, file_id: UUID, chunks: Dict[int, bytes]) -> None:
        """Insert or replace chunks by index"""
        pass

    @abstractmethod
    async def delete_file(self, db: str, root: str, file_id: UUID) -> None:
        """Remove the document and every chunk of a file"""
        pass

    @abstractmethod
    async def list_documents(self, db: str, root: str) -> List[FileDocument]:
        """Get the documents of every file in a root"""
        pass


class GridFile:
    """
    Handle on one stored file, opened in a fixed mode.

    'r' reads an existing file. 'w' truncates or creates. 'w+' opens or
    creates without truncating, positioned at 0. Written chunks are kept in
    memory and persisted, together with the document, on close().
    """

    def __init__(self, store: ChunkStore, db: str, file_id: UUID, filename: str, mode: str, options: FileOptions):
        if mode not in READ_MODES | WRITE_MODES:
            raise ModeError(f"Illegal mode {mode!r}")
        self.store = store
        self.db = db
        self.file_id = file_id
        self.filename = filename
        self.mode = mode
        self.root = options.root or store.default_root
        self.content_type = options.content_type or DEFAULT_CONTENT_TYPE
        self.metadata = options.metadata
        self.chunk_size = options.chunk_size or DEFAULT_CHUNK_SIZE
        self.length = 0
        self.position = 0
        self.upload_date = None
        self._options = options
        self._pending: Dict[int, bytearray] = {}
        self._cached: Optional[tuple[int, bytes]] = None
        self._state = "new"

    def __repr__(self):
        return f"<GridFile {self.root}/{self.filename} mode={self.mode} state={self._state}>"

    @property
    def readable(self) -> bool:
        return self.mode in READ_MODES

    @property
    def writable(self) -> bool:
        return self.mode in WRITE_MODES

    @property
    def closed(self) -> bool:
        return self._state == "closed"

    def _ensure_open(self):
        if self._state == "new":
            raise StoreError(f"File {self.filename} is not open")
        if self._state == "closed":
            raise StoreError(f"File {self.filename} is closed")

    def _load(self, doc: FileDocument):
        self.length = doc.length
        self.chunk_size = doc.chunk_size
        self.upload_date = doc.upload_date
        self.content_type = self._options.content_type or doc.content_type
        self.metadata = self._options.metadata if self._options.metadata is not None else doc.metadata

    def _document(self) -> FileDocument:
        return FileDocument(
            id=self.file_id,
            filename=self.filename,
            content_type=self.content_type,
            length=self.length,
            chunk_size=self.chunk_size,
            upload_date=self.upload_date,
            metadata=self.metadata,
        )

    async def open(self) -> "GridFile":
        if self._state != "new":
            raise StoreError(f"File {self.filename} was already opened")

        doc = await self.store.load_document(self.db, self.root, self.file_id)
        if self.mode == "r":
            if doc is None:
                raise FileNotFound(f"File {self.filename} does not exist in {self.db}/{self.root}")
            self._load(doc)
        elif self.mode == "w":
            if doc is not None:
                await self.store.delete_file(self.db, self.root, self.file_id)
            self.upload_date = utc_now()
        elif doc is not None:
            self._load(doc)
        else:
            self.upload_date = utc_now()

        self._state = "open"
        return self

    async def _chunk(self, index: int) -> bytearray:
        if index in self._pending:
            return self._pending[index]
        if self.mode == "w":
            # truncated on open, nothing stored past what is pending
            return bytearray()
        if self._cached and self._cached[0] == index:
            return bytearray(self._cached[1])
        data = await self.store.read_chunk(self.db, self.root, self.file_id, index)
        data = data or b""
        if self.readable:
            self._cached = (index, data)
        return bytearray(data)

    async def read(self, length: Optional[int] = None, buffer=None) -> Union[bytes, int]:
        """
        Read from the current position.

        Without a buffer returns up to `length` bytes (everything left when
        `length` is None). With a writable buffer, fills it and returns the
        byte count.
        """
        self._ensure_open()
        if not self.readable:
            raise ModeError(f"File {self.filename} is not open for reading")

        remaining = self.length - self.position
        length = remaining if length is None else max(0, min(length, remaining))
        if buffer is not None:
            view = memoryview(buffer)
            if view.readonly:
                raise StoreError(f"Read buffer for {self.filename} is not writable")
            if view.nbytes < length:
                raise StoreError(f"Read buffer for {self.filename} holds {view.nbytes} of {length} bytes")

        data = bytearray()
        while len(data) < length:
            index, offset = divmod(self.position, self.chunk_size)
            chunk = await self._chunk(index)
            piece = chunk[offset:offset + length - len(data)]
            if not piece:
                raise StoreError(f"Chunk {index} of {self.filename} is missing")
            data += piece
            self.position += len(piece)

        if buffer is None:
            return bytes(data)
        buffer[:length] = data
        return length

    async def write(self, data) -> int:
        self._ensure_open()
        if not self.writable:
            raise ModeError(f"File {self.filename} is not open for writing")

        view = memoryview(data).cast("B")
        written = 0
        while written < len(view):
            index, offset = divmod(self.position, self.chunk_size)
            chunk = await self._chunk(index)
            take = min(self.chunk_size - offset, len(view) - written)
            chunk[offset:offset + take] = view[written:written + take]
            self._pending[index] = chunk
            written += take
            self.position += take
            self.length = max(self.length, self.position)
        return written

    async def seek(self, position: int) -> int:
        self._ensure_open()
        if position < 0 or position > self.length:
            raise SeekError(f"Cannot seek to {position} in {self.filename} of length {self.length}")
        self.position = position
        return position

    async def close(self) -> None:
        self._ensure_open()
        if self.writable:
            if self._pending:
                chunks = {index: bytes(chunk) for index, chunk in self._pending.items()}
                await self.store.write_chunks(self.db, self.root, self.file_id, chunks)
            self.upload_date = utc_now()
            await self.store.save_document(self.db, self.root, self._document())
            self._pending.clear()
        self._cached = None
        self._state = "closed"

    async def unlink(self) -> None:
        """Delete the file this handle points to and drop the handle"""
        await self.store.delete_file(self.db, self.root, self.file_id)
        self._pending.clear()
        self._cached = None
        self._state = "closed"

    def stream(self):
        from .stream import GridReadStream, GridWriteStream

        if self.readable:
            return GridReadStream(self)
        return GridWriteStream(self)
