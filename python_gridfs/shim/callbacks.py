"""
Completion-callback surface over GridFs.

Every coroutine operation op(*args) is exposed as op(*args, callback=cb):
the operation is scheduled on the running loop and cb receives (error,)
on failure or (None, *results) on success. Tuple results are spread, so
read() completes with cb(None, bytes_read, buffer).
"""
import asyncio
import inspect
import logging
from typing import Any, Callable

from .gridfs import GridFs

logger = logging.getLogger(__name__)

Callback = Callable[..., Any]

STREAM_FACTORIES = frozenset({"create_read_stream", "create_write_stream"})


def _complete(callback: Callback, error: BaseException = None, result: Any = None):
    try:
        if error is not None:
            callback(error)
        elif result is None:
            callback(None)
        elif isinstance(result, tuple):
            callback(None, *result)
        else:
            callback(None, result)
    except Exception:
        logger.exception("Completion callback raised")


def with_callback(awaitable, callback: Callback) -> asyncio.Future:
    """Run awaitable on the current loop and report its outcome to callback"""
    future = asyncio.ensure_future(awaitable)

    def _done(fut: asyncio.Future):
        if fut.cancelled():
            _complete(callback, asyncio.CancelledError())
        elif fut.exception() is not None:
            _complete(callback, fut.exception())
        else:
            _complete(callback, result=fut.result())

    future.add_done_callback(_done)
    return future


class CallbackGridFs:
    """Wraps a GridFs so each operation takes a completion callback."""

    def __init__(self, fs: GridFs):
        self.fs = fs

    def __getattr__(self, name: str):
        target = getattr(self.fs, name)
        if name in STREAM_FACTORIES or not callable(target):
            return target

        def call(*args, callback: Callback, **kwargs):
            try:
                result = target(*args, **kwargs)
            except Exception as e:
                # bad arguments still complete through the callback
                asyncio.get_running_loop().call_soon(_complete, callback, e)
                return None
            if inspect.isawaitable(result):
                return with_callback(result, callback)
            asyncio.get_running_loop().call_soon(_complete, callback, None, result)
            return None

        call.__name__ = name
        return call
