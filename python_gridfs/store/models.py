from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID
from pydantic import BaseModel, Field

DEFAULT_CHUNK_SIZE = 255 * 1024
DEFAULT_CONTENT_TYPE = "binary/octet-stream"


def utc_now() -> datetime:
    # stored documents carry millisecond precision
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


class FileOptions(BaseModel):
    """Options accepted when a file handle is created."""
    root: Optional[str] = None
    content_type: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    chunk_size: Optional[int] = Field(default=None, gt=0)


class FileDocument(BaseModel):
    """Per-file record kept next to the chunks."""
    id: UUID
    filename: str
    content_type: str = DEFAULT_CONTENT_TYPE
    length: int = 0
    chunk_size: int = DEFAULT_CHUNK_SIZE
    upload_date: datetime = Field(default_factory=utc_now)
    metadata: Optional[Dict[str, Any]] = None
