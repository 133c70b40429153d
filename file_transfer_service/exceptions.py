class FileStorageError(Exception):
    """Base class."""


class NotFoundError(FileStorageError):
    pass


class InvalidMoveError(FileStorageError):
    """Directory move would make a directory its own ancestor."""


class StorageIOError(FileStorageError):
    """Blob read, write or delete failed on the filesystem."""


class MetadataIOError(FileStorageError):
    """Query against the metadata store failed."""


class ConflictError(MetadataIOError):
    pass
