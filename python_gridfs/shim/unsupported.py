"""Filesystem calls that have no mapping onto a flat chunked store."""
from functools import partial

from errors import OperationNotSupported

UNSUPPORTED_OPERATIONS = frozenset({
    "rename",
    "truncate",
    "ftruncate",
    "chown",
    "fchown",
    "lchown",
    "lchmod",
    "lstat",
    "link",
    "symlink",
    "readlink",
    "realpath",
    "rmdir",
    "mkdir",
    "utimes",
    "futimes",
    "fsync",
    "watch_file",
    "unwatch_file",
    "watch",
    "access",
})


async def reject(operation: str, *args, **kwargs):
    raise OperationNotSupported(operation)


class UnsupportedOperations:
    """
    Mixin resolving every name in UNSUPPORTED_OPERATIONS to a coroutine
    function that ignores its arguments and raises OperationNotSupported.
    """

    def __getattr__(self, name: str):
        if name in UNSUPPORTED_OPERATIONS:
            return partial(reject, name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
