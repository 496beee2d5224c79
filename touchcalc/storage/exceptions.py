"""Exceptions raised by path stores."""

from typing import Optional, Tuple


class StorageError(RuntimeError):
    """Base class for path store failures."""


class InvalidPath(ValueError):
    """A path is malformed, or used somewhere it is not allowed."""


class NotFound(StorageError):
    """No file exists at the requested path."""


class AlreadyExists(StorageError):
    """A file or directory already occupies the requested path."""


class ParentMissing(StorageError):
    """The parent of the requested path is not an existing directory."""


class Conflict(StorageError):
    """The stored version does not match the version the caller expected."""


class BackendUnavailable(StorageError):
    """The underlying storage engine could not complete the operation."""


class Corrupt(StorageError):
    """Data stored at a path cannot be decoded."""

    def __init__(self, path: Tuple[str, ...],
                 cause: Optional[BaseException] = None) -> None:
        """Record the offending path and what went wrong with it."""
        self.path = path
        self.cause = cause
        super(Corrupt, self).__init__(
            f'Corrupt data at {"/".join(path)}: {cause}'
        )
