class GridFsError(Exception):
    """Base error for python-gridfs"""
    def __init__(self, message: str = None, source: Exception = None):
        self.message = message
        self.source = source
        super().__init__(self.__str__())

    def __str__(self):
        msg = self.message or self.__class__.__name__
        if self.source:
            return f"{msg}: {self.source}"
        return msg

class UnsupportedMode(GridFsError):
    """open() was given a mode other than 'r', 'w' or 'w+'"""
    def __init__(self, mode):
        self.mode = mode
        super().__init__(f"Unsupported flag {mode!r}")

class OperationNotSupported(GridFsError):
    """The operation has no meaning on a flat chunked store"""
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Operation not supported: {operation}")

class StoreError(GridFsError):
    pass

class FileNotFound(StoreError):
    pass

class ModeError(StoreError):
    pass

class InvalidFileId(StoreError):
    pass

class SeekError(StoreError):
    pass

class ConfigError(GridFsError):
    pass
