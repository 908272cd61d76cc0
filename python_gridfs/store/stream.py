"""Streaming access to a GridFile, opened lazily on first use."""
import logging
from typing import AsyncIterator

from .interface import GridFile

logger = logging.getLogger(__name__)


class GridReadStream:
    """
    Async iterator over the chunks of a file.
    The handle is opened on first iteration and closed once exhausted or on error.
    """

    def __init__(self, grid_file: GridFile):
        self.file = grid_file
        self._consumed = False

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise RuntimeError("Read stream was already consumed")
        self._consumed = True

        await self.file.open()
        try:
            while True:
                chunk = await self.file.read(self.file.chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            if not self.file.closed:
                await self.file.close()

    async def read(self) -> bytes:
        """Drain the stream into a single bytes object"""
        parts = []
        async for chunk in self:
            parts.append(chunk)
        return b"".join(parts)

    async def pipe(self, destination, end: bool = True):
        """Write every chunk to destination, closing it afterwards when end is set"""
        async for chunk in self:
            await destination.write(chunk)
        if end:
            await destination.close()
        return destination


class GridWriteStream:
    """
    Sequential writer. Data is committed when the stream is closed.
    """

    def __init__(self, grid_file: GridFile):
        self.file = grid_file
        self._opened = False

    @property
    def closed(self) -> bool:
        return self.file.closed

    async def _ensure_open(self):
        if not self._opened:
            await self.file.open()
            self._opened = True

    async def write(self, data) -> int:
        await self._ensure_open()
        return await self.file.write(data)

    async def close(self) -> None:
        await self._ensure_open()
        if not self.file.closed:
            await self.file.close()
            logger.debug(f"Write stream on {self.file.filename} committed {self.file.length} bytes")

    async def consume(self, source) -> int:
        """Write everything from an (async) iterable of byte chunks, then close"""
        total = 0
        if hasattr(source, "__aiter__"):
            async for chunk in source:
                total += await self.write(chunk)
        else:
            for chunk in source:
                total += await self.write(chunk)
        await self.close()
        return total

    async def __aenter__(self):
        await self._ensure_open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            await self.close()
