"""
Path store on a local filesystem.

Structure::

    <root>/
      home/                 directory
        users/              directory
          someone@foo.com   file: {"version": 3, "data": "..."}

Files are written to a temporary sibling first and then moved into place,
so readers never see a partial write.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Any, Optional, Sequence, Tuple

from .base import PathStore
from .domain import Path, StoredItem, to_path, parent_of, ancestors, path_key
from .exceptions import AlreadyExists, ParentMissing, NotFound, Conflict, \
    Corrupt, BackendUnavailable, InvalidPath

logger = logging.getLogger(__name__)


class FilesystemStore(PathStore):
    """
    Keep path nodes as real files and directories under ``root``.

    Version checks are serialized by a lock held by this instance, so
    conditional updates are only safe among threads sharing one store.
    """

    def __init__(self, root: str) -> None:
        """Use (and if necessary create) ``root`` as the tree root."""
        self.root = os.path.abspath(root)
        self._lock = threading.Lock()
        try:
            os.makedirs(self.root, exist_ok=True)
        except OSError as e:
            raise BackendUnavailable(f'Cannot use {self.root}: {e}') from e

    def _local(self, path: Path) -> str:
        return os.path.join(self.root, *path)

    def _write_temp(self, directory: str, data: Any, version: int) -> str:
        """Write an envelope to a new temporary file and return its name."""
        content = json.dumps({'version': version, 'data': data})
        fd, tmp = tempfile.mkstemp(dir=directory, prefix='.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            self._discard(tmp)
            raise
        return tmp

    def _discard(self, tmp: str) -> None:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning('Could not remove temporary file %s: %s', tmp, e)

    def _read(self, path: Path) -> Optional[Tuple[Any, int]]:
        """Load the payload and version at ``path``, or ``None``."""
        try:
            with open(self._local(path), 'r', encoding='utf-8') as f:
                raw = f.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None
        except OSError as e:
            raise BackendUnavailable(f'Cannot read {path_key(path)}: {e}') \
                from e
        try:
            envelope = json.loads(raw)
            version = envelope['version']
            data = envelope['data']
        except (ValueError, TypeError, KeyError) as e:
            logger.error('Undecodable file at %s', path_key(path))
            raise Corrupt(path, e) from e
        if not isinstance(version, int):
            raise Corrupt(path, ValueError(f'Bad version {version!r}'))
        return data, version

    def create_directory(self, path: Sequence[str]) -> None:
        path = to_path(path)
        for prefix in ancestors(path):
            local = self._local(prefix)
            try:
                os.mkdir(local)
            except FileExistsError:
                if not os.path.isdir(local):
                    raise AlreadyExists(
                        f'A file exists at {path_key(prefix)}'
                    )
            except OSError as e:
                raise BackendUnavailable(
                    f'Cannot create {path_key(prefix)}: {e}'
                ) from e

    def create_file(self, path: Sequence[str], data: Any) -> StoredItem:
        path = to_path(path)
        parent = self._local(parent_of(path))
        if not os.path.isdir(parent):
            raise ParentMissing(f'No directory at {path_key(path[:-1])}')
        try:
            tmp = self._write_temp(parent, data, 1)
        except OSError as e:
            raise BackendUnavailable(f'Cannot write {path_key(path)}: {e}') \
                from e
        try:
            # Fails if anything, file or directory, is already there.
            os.link(tmp, self._local(path))
        except FileExistsError as e:
            raise AlreadyExists(f'Already exists: {path_key(path)}') from e
        except FileNotFoundError as e:
            raise ParentMissing(f'No directory at {path_key(path[:-1])}') \
                from e
        except OSError as e:
            raise BackendUnavailable(f'Cannot write {path_key(path)}: {e}') \
                from e
        finally:
            self._discard(tmp)
        return StoredItem(path, json.loads(json.dumps(data)), 1)

    def get_file(self, path: Sequence[str]) -> Optional[StoredItem]:
        path = to_path(path)
        found = self._read(path)
        if found is None:
            return None
        data, version = found
        return StoredItem(path, data, version)

    def update_file(self, path: Sequence[str], data: Any,
                    expected_version: Optional[int] = None) -> StoredItem:
        path = to_path(path)
        with self._lock:
            found = self._read(path)
            if found is None:
                raise NotFound(f'No file at {path_key(path)}')
            _, version = found
            if expected_version is not None and version != expected_version:
                raise Conflict(f'{path_key(path)} is at version {version}, '
                               f'expected {expected_version}')
            local = self._local(path)
            try:
                tmp = self._write_temp(os.path.dirname(local), data,
                                       version + 1)
            except OSError as e:
                raise BackendUnavailable(
                    f'Cannot write {path_key(path)}: {e}'
                ) from e
            try:
                os.replace(tmp, local)
            except OSError as e:
                self._discard(tmp)
                raise BackendUnavailable(
                    f'Cannot write {path_key(path)}: {e}'
                ) from e
        return StoredItem(path, json.loads(json.dumps(data)), version + 1)

    def delete_file(self, path: Sequence[str]) -> None:
        path = to_path(path)
        if not path:
            raise InvalidPath('The root is not a file')
        local = self._local(path)
        with self._lock:
            if not os.path.isfile(local):
                raise NotFound(f'No file at {path_key(path)}')
            try:
                os.remove(local)
            except FileNotFoundError as e:
                raise NotFound(f'No file at {path_key(path)}') from e
            except OSError as e:
                raise BackendUnavailable(
                    f'Cannot delete {path_key(path)}: {e}'
                ) from e
