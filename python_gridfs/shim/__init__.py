from .stats import Stats
from .unsupported import UNSUPPORTED_OPERATIONS
from .gridfs import GridFs, OPEN_FLAGS
from .callbacks import CallbackGridFs, with_callback

__all__ = [
    'Stats',
    'UNSUPPORTED_OPERATIONS',
    'GridFs',
    'OPEN_FLAGS',
    'CallbackGridFs',
    'with_callback',
]
