from .error import (
    GridFsError, UnsupportedMode, OperationNotSupported, StoreError, FileNotFound,
    ModeError, InvalidFileId, SeekError, ConfigError
)
