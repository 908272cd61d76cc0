import os
import sys
import pytest

# ensure project root on path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fakeredis.aioredis import FakeRedis
from uuid6 import uuid7

from shim import GridFs
from store import MemoryChunkStore, RedisChunkStore

# small chunks so every test crosses chunk boundaries
TEST_CHUNK_SIZE = 7


def make_store(kind: str):
    if kind == "memory":
        return MemoryChunkStore()
    store = RedisChunkStore("redis://localhost:6379/0")
    # inject fake redis for testing
    store._redis = FakeRedis(decode_responses=False)
    return store


@pytest.fixture(params=["memory", "redis"])
def store(request):
    return make_store(request.param)


@pytest.fixture
def gfs(store):
    # a fresh db per test keeps readdir results isolated
    return GridFs(store, f"test-{uuid7()}", "fs")


@pytest.fixture
def create_file(gfs):
    """Write a file straight through the store, bypassing the adapter"""
    async def _create(data: bytes = b"", file_id=None, **options):
        file_id = file_id or gfs.store.new_id()
        options.setdefault("chunk_size", TEST_CHUNK_SIZE)
        fd = gfs.store.file(gfs.db, file_id, str(file_id), "w", dict(options, root=gfs.root))
        await fd.open()
        await fd.write(data)
        await fd.close()
        return file_id
    return _create


@pytest.fixture
def stored_data(gfs):
    """Read a file straight through the store, bypassing the adapter"""
    async def _read(file_id) -> bytes:
        fd = gfs.store.file(gfs.db, file_id, None, "r", {"root": gfs.root})
        await fd.open()
        data = await fd.read()
        await fd.close()
        return data
    return _read
