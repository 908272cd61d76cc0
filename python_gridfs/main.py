import asyncio
import logging
import mimetypes
import sys
from pathlib import Path

import aiofiles
import click

from common.config import get_settings, load_settings, update_settings
from errors import GridFsError
from shim import GridFs
from store import create_store
from utils.logger import setup_logging

logger = logging.getLogger("main")

COPY_BUFFER_SIZE = 64 * 1024


def _run(command):
    """Build the GridFs from settings, run command(fs) and release the store"""
    settings = get_settings()

    async def _main():
        store = create_store(settings)
        fs = GridFs(store, settings.store.database, settings.store.root)
        try:
            return await command(fs)
        finally:
            await store.close()

    try:
        return asyncio.run(_main())
    except GridFsError as e:
        raise click.ClickException(str(e))


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="TOML configuration file")
def cli(config_path):
    if config_path:
        update_settings(load_settings(config_path))
    settings = get_settings()
    setup_logging(
        level=settings.logging.level,
        format_type=settings.logging.format,
        node_id=settings.node_id
    )


@cli.command("ls")
def list_files():
    """Lists the files of the configured root."""
    async def _ls(fs: GridFs):
        for name in await fs.readdir():
            click.echo(name)
    _run(_ls)


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--id", "file_id", help="Store under this id instead of a new one")
@click.option("--content-type", help="Defaults to a guess from the file name")
def put(source: Path, file_id, content_type):
    """Uploads a local file and prints its id."""
    settings = get_settings()

    async def _put(fs: GridFs):
        target = file_id or str(fs.store.new_id())
        options = {
            "content_type": content_type or mimetypes.guess_type(source.name)[0],
            "metadata": {"source": source.name},
            "chunk_size": settings.store.chunk_size,
        }
        stream = fs.create_write_stream(target, options)
        async with aiofiles.open(source, "rb") as f:
            while True:
                data = await f.read(COPY_BUFFER_SIZE)
                if not data:
                    break
                await stream.write(data)
        await stream.close()
        logger.info(f"Uploaded {source} as {target} ({stream.file.length} bytes)")
        click.echo(target)
    _run(_put)


@cli.command()
@click.argument("file_id")
@click.argument("destination", type=click.Path(dir_okay=False, path_type=Path))
def get(file_id, destination: Path):
    """Downloads a file to a local path."""
    async def _get(fs: GridFs):
        chunks = fs.create_read_stream(file_id).__aiter__()
        # opens the stored file, so a missing id fails before anything is created locally
        first = await anext(chunks, None)
        async with aiofiles.open(destination, "wb") as f:
            if first is not None:
                await f.write(first)
            async for chunk in chunks:
                await f.write(chunk)
        logger.info(f"Downloaded {file_id} to {destination}")
    _run(_get)


@cli.command()
@click.argument("file_id")
def cat(file_id):
    """Writes a file's contents to stdout."""
    async def _cat(fs: GridFs):
        data = await fs.read_file(file_id)
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    _run(_cat)


@cli.command()
@click.argument("file_id")
def stat(file_id):
    """Prints a file's stat record as JSON."""
    async def _stat(fs: GridFs):
        stats = await fs.stat(file_id)
        click.echo(stats.model_dump_json(indent=2))
    _run(_stat)


@cli.command()
@click.argument("file_id")
def rm(file_id):
    """Deletes a file; missing files are ignored."""
    async def _rm(fs: GridFs):
        await fs.unlink(file_id)
    _run(_rm)


if __name__ == "__main__":
    cli()
