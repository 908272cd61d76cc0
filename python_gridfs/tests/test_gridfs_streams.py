import os

import pytest

from errors import FileNotFound
from store import GridReadStream, GridWriteStream


@pytest.mark.asyncio
async def test_write_stream_then_read_stream(gfs):
    file_id = gfs.store.new_id()
    data = os.urandom(5000)

    stream = gfs.create_write_stream(file_id, {"chunk_size": 1024})
    assert isinstance(stream, GridWriteStream)
    for start in range(0, len(data), 300):
        await stream.write(data[start:start + 300])
    await stream.close()

    chunks = [chunk async for chunk in gfs.create_read_stream(str(file_id))]

    assert b"".join(chunks) == data
    assert [len(c) for c in chunks] == [1024] * 4 + [904]


@pytest.mark.asyncio
async def test_read_stream_is_lazy(gfs):
    stream = gfs.create_read_stream(gfs.store.new_id())
    assert isinstance(stream, GridReadStream)

    with pytest.raises(FileNotFound):
        await stream.read()


@pytest.mark.asyncio
async def test_read_stream_closes_its_handle(gfs, create_file):
    file_id = await create_file(b"payload")
    stream = gfs.create_read_stream(file_id)

    assert await stream.read() == b"payload"
    assert stream.file.closed is True


@pytest.mark.asyncio
async def test_pipe_between_files(gfs, create_file):
    data = os.urandom(777)
    source = await create_file(data)
    target = gfs.store.new_id()

    destination = gfs.create_write_stream(target)
    await gfs.create_read_stream(source).pipe(destination)

    assert destination.closed is True
    assert await gfs.read_file(target) == data


@pytest.mark.asyncio
async def test_write_stream_consumes_async_source(gfs):
    file_id = gfs.store.new_id()
    parts = [b"alpha-", b"beta-", b"gamma"]

    async def source():
        for part in parts:
            yield part

    written = await gfs.create_write_stream(file_id).consume(source())

    assert written == 16
    assert await gfs.read_file(file_id) == b"alpha-beta-gamma"


@pytest.mark.asyncio
async def test_write_stream_context_manager(gfs):
    file_id = gfs.store.new_id()

    async with gfs.create_write_stream(file_id) as stream:
        await stream.write(b"inside")

    assert await gfs.read_file(file_id) == b"inside"


@pytest.mark.asyncio
async def test_write_stream_not_committed_on_error(gfs):
    file_id = gfs.store.new_id()

    with pytest.raises(RuntimeError):
        async with gfs.create_write_stream(file_id) as stream:
            await stream.write(b"partial")
            raise RuntimeError("producer failed")

    assert await gfs.exists(file_id) is False


@pytest.mark.asyncio
async def test_empty_write_stream_creates_empty_file(gfs):
    file_id = gfs.store.new_id()

    await gfs.create_write_stream(file_id).close()

    assert await gfs.exists(file_id) is True
    assert await gfs.create_read_stream(file_id).read() == b""
