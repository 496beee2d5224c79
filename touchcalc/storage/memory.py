"""In-memory path store."""

import threading
from typing import Any, Dict, Optional, Sequence, Union

from .base import PathStore, dump_payload, load_payload
from .domain import Path, StoredItem, to_path, parent_of
from .exceptions import AlreadyExists, ParentMissing, NotFound, Conflict, \
    InvalidPath


class _File(object):
    """A leaf node: serialized payload plus version."""

    __slots__ = ('raw', 'version')

    def __init__(self, raw: str, version: int = 1) -> None:
        self.raw = raw
        self.version = version


Node = Union[Dict[str, Any], _File]


class MemoryStore(PathStore):
    """
    Path store backed by a nested dict.

    Nested dicts are directories, :class:`._File` values are files. All
    operations hold a single lock, so the store is safe to share between
    threads. Nothing survives the process.
    """

    def __init__(self) -> None:
        self._tree: Dict[str, Node] = {}
        self._lock = threading.RLock()

    def _resolve(self, path: Path) -> Optional[Node]:
        """Walk the tree to the node at ``path``, or ``None``."""
        node: Node = self._tree
        for part in path:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def create_directory(self, path: Sequence[str]) -> None:
        path = to_path(path)
        with self._lock:
            node: Node = self._tree
            for part in path:
                child = node.get(part)
                if child is None:
                    child = node[part] = {}
                elif not isinstance(child, dict):
                    raise AlreadyExists(f'A file exists at {part!r} in {path}')
                node = child

    def create_file(self, path: Sequence[str], data: Any) -> StoredItem:
        path = to_path(path)
        parent = parent_of(path)
        raw = dump_payload(data)
        with self._lock:
            directory = self._resolve(parent)
            if not isinstance(directory, dict):
                raise ParentMissing(f'No directory at {parent}')
            if path[-1] in directory:
                raise AlreadyExists(f'Already exists: {path}')
            directory[path[-1]] = _File(raw)
        return StoredItem(path, load_payload(path, raw), 1)

    def get_file(self, path: Sequence[str]) -> Optional[StoredItem]:
        path = to_path(path)
        with self._lock:
            node = self._resolve(path)
            if not isinstance(node, _File):
                return None
            raw, version = node.raw, node.version
        return StoredItem(path, load_payload(path, raw), version)

    def update_file(self, path: Sequence[str], data: Any,
                    expected_version: Optional[int] = None) -> StoredItem:
        path = to_path(path)
        raw = dump_payload(data)
        with self._lock:
            node = self._resolve(path)
            if not isinstance(node, _File):
                raise NotFound(f'No file at {path}')
            if expected_version is not None \
                    and node.version != expected_version:
                raise Conflict(f'{path} is at version {node.version}, '
                               f'expected {expected_version}')
            node.raw = raw
            node.version += 1
            version = node.version
        return StoredItem(path, load_payload(path, raw), version)

    def delete_file(self, path: Sequence[str]) -> None:
        path = to_path(path)
        if not path:
            raise InvalidPath('The root is not a file')
        with self._lock:
            directory = self._resolve(parent_of(path))
            if not isinstance(directory, dict) \
                    or not isinstance(directory.get(path[-1]), _File):
                raise NotFound(f'No file at {path}')
            del directory[path[-1]]
