"""
Path store on Redis, one JSON document per node.

Keys are ``<prefix><segment>/<segment>/...``. Values are either
``{"type": "dir"}`` or ``{"type": "file", "version": 1, "data": ...}``.

Exclusive creation relies on ``SET NX``. Updates and deletes that must see
a consistent document run inside a ``WATCH``/``MULTI`` transaction, so a
concurrent writer makes the transaction retry instead of interleaving.
"""

import json
import logging
from typing import Any, Dict, Optional, Sequence

import redis

from .base import PathStore
from .domain import Path, StoredItem, to_path, parent_of, ancestors, path_key
from .exceptions import AlreadyExists, ParentMissing, NotFound, Conflict, \
    Corrupt, BackendUnavailable, InvalidPath

logger = logging.getLogger(__name__)

DIRECTORY = 'dir'
FILE = 'file'


class RedisStore(PathStore):
    """
    Manages path nodes in Redis.

    The StrictRedis instance is thread safe, and connections are attached at
    the time a command is executed. This class adds the key layout and the
    translation of Redis failures into storage errors.
    """

    def __init__(self, r: redis.StrictRedis,
                 prefix: str = 'touchcalc:node:') -> None:
        """Use an existing client; all keys are namespaced by ``prefix``."""
        self.r = r
        self.prefix = prefix

    def _key(self, path: Path) -> str:
        return self.prefix + path_key(path)

    def _decode(self, path: Path, raw: Optional[bytes]) \
            -> Optional[Dict[str, Any]]:
        if raw is None:
            return None
        try:
            doc = json.loads(raw)
            kind = doc['type']
            if kind == FILE and not isinstance(doc['version'], int):
                raise ValueError(f'Bad version {doc["version"]!r}')
            if kind == FILE and 'data' not in doc:
                raise KeyError('data')
        except (ValueError, TypeError, KeyError) as e:
            logger.error('Undecodable document at %s', path_key(path))
            raise Corrupt(path, e) from e
        if kind not in (DIRECTORY, FILE):
            raise Corrupt(path, ValueError(f'Unknown node type {kind!r}'))
        return doc

    def _file(self, data: Any, version: int) -> str:
        return json.dumps({'type': FILE, 'version': version, 'data': data})

    def create_directory(self, path: Sequence[str]) -> None:
        path = to_path(path)
        marker = json.dumps({'type': DIRECTORY})
        try:
            for prefix in ancestors(path):
                key = self._key(prefix)
                if self.r.set(key, marker, nx=True):
                    continue
                doc = self._decode(prefix, self.r.get(key))
                if doc is not None and doc['type'] == FILE:
                    raise AlreadyExists(
                        f'A file exists at {path_key(prefix)}'
                    )
        except redis.exceptions.RedisError as e:
            raise BackendUnavailable(f'Redis failed: {e}') from e

    def create_file(self, path: Sequence[str], data: Any) -> StoredItem:
        path = to_path(path)
        parent = parent_of(path)
        value = self._file(data, 1)
        try:
            if parent:
                doc = self._decode(parent, self.r.get(self._key(parent)))
                if doc is None or doc['type'] != DIRECTORY:
                    raise ParentMissing(f'No directory at {path_key(parent)}')
            if not self.r.set(self._key(path), value, nx=True):
                raise AlreadyExists(f'Already exists: {path_key(path)}')
        except redis.exceptions.RedisError as e:
            raise BackendUnavailable(f'Redis failed: {e}') from e
        return StoredItem(path, json.loads(value)['data'], 1)

    def get_file(self, path: Sequence[str]) -> Optional[StoredItem]:
        path = to_path(path)
        if not path:
            return None
        try:
            raw = self.r.get(self._key(path))
        except redis.exceptions.RedisError as e:
            raise BackendUnavailable(f'Redis failed: {e}') from e
        doc = self._decode(path, raw)
        if doc is None or doc['type'] != FILE:
            return None
        return StoredItem(path, doc['data'], doc['version'])

    def update_file(self, path: Sequence[str], data: Any,
                    expected_version: Optional[int] = None) -> StoredItem:
        path = to_path(path)
        key = self._key(path)
        json.dumps(data)    # Fail on bad payloads before touching Redis.

        def _update(pipe: redis.client.Pipeline) -> int:
            doc = self._decode(path, pipe.get(key)) if path else None
            if doc is None or doc['type'] != FILE:
                raise NotFound(f'No file at {path_key(path)}')
            if expected_version is not None \
                    and doc['version'] != expected_version:
                raise Conflict(f'{path_key(path)} is at version '
                               f'{doc["version"]}, '
                               f'expected {expected_version}')
            version: int = doc['version'] + 1
            pipe.multi()
            pipe.set(key, self._file(data, version))
            return version

        try:
            version = self.r.transaction(_update, key,
                                         value_from_callable=True)
        except redis.exceptions.RedisError as e:
            raise BackendUnavailable(f'Redis failed: {e}') from e
        return StoredItem(path, json.loads(json.dumps(data)), version)

    def delete_file(self, path: Sequence[str]) -> None:
        path = to_path(path)
        if not path:
            raise InvalidPath('The root is not a file')
        key = self._key(path)

        def _delete(pipe: redis.client.Pipeline) -> None:
            doc = self._decode(path, pipe.get(key))
            if doc is None or doc['type'] != FILE:
                raise NotFound(f'No file at {path_key(path)}')
            pipe.multi()
            pipe.delete(key)

        try:
            self.r.transaction(_delete, key)
        except redis.exceptions.RedisError as e:
            raise BackendUnavailable(f'Redis failed: {e}') from e


def get_redis_store(host: str, port: int, database: int,
                    timeout: Optional[float] = None,
                    prefix: str = 'touchcalc:node:',
                    fake: bool = False) -> RedisStore:
    """Connect to Redis (or a fake in-process Redis) and wrap it."""
    if fake:
        import fakeredis
        return RedisStore(fakeredis.FakeStrictRedis(), prefix=prefix)
    r = redis.StrictRedis(host=host, port=port, db=database,
                          socket_timeout=timeout,
                          socket_connect_timeout=timeout)
    return RedisStore(r, prefix=prefix)
