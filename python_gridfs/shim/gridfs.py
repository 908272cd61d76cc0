"""
GridFs - filesystem-shaped access to a ChunkStore.

Paths are file identifiers (UUIDs or their string form) inside one
(db, root) namespace; there is no directory tree. Descriptors are the
store's GridFile handles, returned as-is. The store owns mode enforcement:
the adapter never records how a descriptor was opened.

A descriptor must be used by one logical operation at a time. The adapter
holds no locks and does not order concurrent calls sharing a descriptor.
"""
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from errors import UnsupportedMode
from store import ChunkStore, FileOptions, GridFile
from store.interface import FileId
from .stats import Stats
from .unsupported import UnsupportedOperations

logger = logging.getLogger(__name__)

OPEN_FLAGS = ("r", "w", "w+")

Options = Union[FileOptions, Mapping[str, Any], None]


def _is_position(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class GridFs(UnsupportedOperations):
    store: ChunkStore
    db: str
    root: Optional[str] = None

    def _file_options(self, flags: str, options: Options) -> FileOptions:
        if flags == "r" or options is None:
            # caller metadata never reaches a read handle
            return FileOptions(root=self.root)
        if isinstance(options, FileOptions):
            return options.model_copy(update={"root": self.root})
        return FileOptions.model_validate({**options, "root": self.root})

    def _grid_file(self, path: FileId, flags: str, options: Options = None) -> GridFile:
        file_id = self.store.object_id(path)
        return self.store.file(self.db, file_id, str(file_id), flags, self._file_options(flags, options))

    # --- Descriptors ---

    async def open(self, path: FileId, flags: str, options: Options = None) -> GridFile:
        if flags not in OPEN_FLAGS:
            raise UnsupportedMode(flags)

        fd = self._grid_file(path, flags, options)
        await fd.open()
        logger.debug(f"Opened {fd.filename} in {self.db}/{fd.root} mode={flags}", extra={"file_id": fd.file_id})
        return fd

    async def close(self, fd: GridFile) -> None:
        await fd.close()
        logger.debug(f"Closed {fd.filename}", extra={"file_id": fd.file_id})

    # --- Positional I/O ---

    async def write(self, fd: GridFile, buffer, offset: int, length: int, position: Optional[int] = None) -> Tuple[int, Any]:
        """
        Write buffer[offset:offset + length] at the current position, or at
        `position` when given. Returns (length, buffer); the store does not
        report short writes, so length is the requested count.
        """
        if _is_position(position):
            await fd.seek(position)
            return await self.write(fd, buffer, offset, length)

        await fd.write(memoryview(buffer)[offset:offset + length])
        return length, buffer

    async def read(self, fd: GridFile, buffer, offset: int, length: int, position: Optional[int] = None):
        """
        Read up to `length` bytes into buffer[offset:], from the current
        position or from `position` when given. Returns (bytes_read, buffer).

        The count is clamped to what is left in the file: reading at the end
        returns (0, buffer) rather than failing. With buffer None the rest
        of the file is returned as bytes instead.
        """
        if _is_position(position):
            await fd.seek(position)
            return await self.read(fd, buffer, offset, length)

        if buffer is None:
            return await fd.read()

        length = min(length, fd.length - fd.position)
        if length <= 0 and fd.readable and not fd.closed:
            return 0, buffer

        # a handle the store does not allow reading from fails here
        await fd.read(length, memoryview(buffer)[offset:offset + length])
        return length, buffer

    # --- Metadata ---

    async def fstat(self, fd: GridFile) -> Stats:
        return Stats.from_file(fd)

    async def stat(self, path: FileId) -> Stats:
        fd = await self.open(path, "r")
        try:
            stats = await self.fstat(fd)
        except Exception:
            await self._close_after_error(fd)
            raise
        await self.close(fd)
        return stats

    async def chmod(self, path: FileId, mode: int) -> None:
        """No permissions exist in the store; accepted and ignored."""

    async def fchmod(self, fd: GridFile, mode: int) -> None:
        """No permissions exist in the store; accepted and ignored."""

    # --- Whole files ---

    async def read_file(self, path: FileId, encoding: Optional[str] = None) -> Union[bytes, str]:
        fd = await self.open(path, "r")
        try:
            data = await self.read(fd, None, 0, 0)
        except Exception:
            await self._close_after_error(fd)
            raise
        await self.close(fd)
        return data.decode(encoding) if encoding else data

    async def write_file(self, path: FileId, data, options: Options = None, encoding: str = "utf-8") -> None:
        """Replace the file with data, creating it if needed."""
        if isinstance(data, str):
            data = data.encode(encoding)
        # a failed write leaves the handle unclosed so nothing gets committed
        fd = await self.open(path, "w", options)
        await self.write(fd, data, 0, len(data))
        await self.close(fd)

    async def append_file(self, path: FileId, data, options: Options = None, encoding: str = "utf-8") -> None:
        """
        Append data to the file, creating it if needed.

        'w+' opens without truncating; the write is placed at the current
        length so existing contents are kept.
        """
        if isinstance(data, str):
            data = data.encode(encoding)
        fd = await self.open(path, "w+", options)
        await self.write(fd, data, 0, len(data), fd.length)
        await self.close(fd)

    async def _close_after_error(self, fd: GridFile) -> None:
        if fd.closed:
            return
        try:
            await fd.close()
        except Exception as e:
            logger.warning(f"Failed to close {fd.filename} after error: {e}", extra={"file_id": fd.file_id})

    # --- Streams ---

    def create_read_stream(self, path: FileId, options: Options = None):
        """Stream over the file's chunks; opened on first iteration."""
        return self._grid_file(path, "r", options).stream()

    def create_write_stream(self, path: FileId, options: Options = None):
        """Stream replacing the file; committed on close."""
        return self._grid_file(path, "w", options).stream()

    # --- Namespace ---

    async def readdir(self, path: Optional[FileId] = None) -> List[str]:
        return await self.store.list(self.db, self.root)

    async def unlink(self, path: FileId) -> None:
        await self.store.unlink(self.db, self.store.object_id(path), self.root)

    async def exists(self, path: FileId) -> bool:
        return await self.store.exist(self.db, self.store.object_id(path), self.root)
