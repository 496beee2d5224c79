"""
Hierarchical, path-addressed storage.

A path is a tuple of string segments, like ``('home', 'users',
'someone@foo.com')``. Every adapter implements :class:`.PathStore` with the
same semantics and the same exceptions, so callers are written once against
the contract and the engine is picked by configuration:

- ``filesystem``: :class:`.FilesystemStore`
- ``redis``: :class:`.RedisStore`, one JSON document per node
- ``sql``: :class:`.SQLStore`, one row per node
- ``memory``: :class:`.MemoryStore`, for tests
"""

import logging
from typing import Any, Optional

from ..context import get_application_config, get_application_global
from .base import PathStore
from .domain import Path, StoredItem, ROOT, to_path, path_key
from .exceptions import StorageError, InvalidPath, NotFound, AlreadyExists, \
    ParentMissing, Conflict, BackendUnavailable, Corrupt
from .memory import MemoryStore
from .filesystem import FilesystemStore
from .document import RedisStore, get_redis_store
from .relational import SQLStore, get_sql_store

logger = logging.getLogger(__name__)

BACKENDS = ('filesystem', 'redis', 'sql', 'memory')


def init_app(app: Any = None) -> None:
    """Set default configuration parameters for an application instance."""
    config = get_application_config(app)
    config.setdefault('STORAGE_BACKEND', 'filesystem')
    config.setdefault('STORAGE_ROOT', './data')
    config.setdefault('REDIS_HOST', 'localhost')
    config.setdefault('REDIS_PORT', '6379')
    config.setdefault('REDIS_DATABASE', '0')
    config.setdefault('REDIS_TIMEOUT', '5')
    config.setdefault('REDIS_PREFIX', 'touchcalc:node:')
    config.setdefault('SQLALCHEMY_DATABASE_URI', 'sqlite:///touchcalc.db')


def get_store(app: Any = None) -> PathStore:
    """
    Build the path store named by ``STORAGE_BACKEND``.

    Raises
    ------
    ValueError
        If the configured backend is not one of :data:`BACKENDS`.
    :class:`.BackendUnavailable`
        If the backend cannot be initialized.

    """
    config = get_application_config(app)
    backend = config.get('STORAGE_BACKEND', 'filesystem')
    logger.debug('Using %s storage backend', backend)
    if backend == 'filesystem':
        return FilesystemStore(config.get('STORAGE_ROOT', './data'))
    if backend == 'redis':
        timeout = config.get('REDIS_TIMEOUT', '5')
        return get_redis_store(
            host=config.get('REDIS_HOST', 'localhost'),
            port=int(config.get('REDIS_PORT', '6379')),
            database=int(config.get('REDIS_DATABASE', '0')),
            timeout=float(timeout) if timeout else None,
            prefix=config.get('REDIS_PREFIX', 'touchcalc:node:'),
            fake=_is_true(config.get('REDIS_FAKE', False))
        )
    if backend == 'sql':
        return get_sql_store(config.get('SQLALCHEMY_DATABASE_URI',
                                        'sqlite:///touchcalc.db'))
    if backend == 'memory':
        return MemoryStore()
    raise ValueError(f'Unknown storage backend {backend!r}; '
                     f'expected one of {", ".join(BACKENDS)}')


def current_store() -> PathStore:
    """Get/create the :class:`.PathStore` for this context."""
    g = get_application_global()
    if g is None:
        return get_store()
    if 'path_store' not in g:
        g.path_store = get_store()
    store: PathStore = g.path_store
    return store


def _is_true(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)
