from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class Stats(BaseModel):
    """
    Snapshot of a stored file in the shape of a stat(2) result.
    Only regular files exist in a chunked store, so every predicate
    other than is_file() is False and the OS-level fields stay at zero.
    """
    model_config = ConfigDict(frozen=True)

    size: int
    atime: datetime
    mtime: datetime
    ctime: datetime
    birthtime: datetime
    content_type: Optional[str] = None
    dev: int = 0
    ino: int = 0
    mode: int = 0
    nlink: int = 1
    uid: int = 0
    gid: int = 0
    rdev: int = 0
    blksize: int = 0
    blocks: int = 0

    @classmethod
    def from_file(cls, fd) -> "Stats":
        uploaded = fd.upload_date
        return cls(
            size=fd.length,
            atime=uploaded,
            mtime=uploaded,
            ctime=uploaded,
            birthtime=uploaded,
            content_type=fd.content_type,
        )

    def is_file(self) -> bool:
        return True

    def is_directory(self) -> bool:
        return False

    def is_block_device(self) -> bool:
        return False

    def is_character_device(self) -> bool:
        return False

    def is_symbolic_link(self) -> bool:
        return False

    def is_fifo(self) -> bool:
        return False

    def is_socket(self) -> bool:
        return False
