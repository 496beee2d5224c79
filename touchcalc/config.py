"""Application configuration."""

import os

VERSION = '0.1.0'

LOGLEVEL = os.environ.get('LOGLEVEL', 20)

#################### Storage ####################
STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'filesystem')
"""Which path store adapter to use.

One of ``filesystem``, ``redis``, ``sql`` or ``memory``. The ``memory``
adapter keeps nothing beyond one application context and is only useful
for tests.
"""

STORAGE_ROOT = os.environ.get('STORAGE_ROOT', './data')
"""Root directory for the ``filesystem`` adapter."""

REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')
REDIS_TIMEOUT = os.environ.get('REDIS_TIMEOUT', '5')
"""Socket timeout in seconds for the ``redis`` adapter."""

REDIS_PREFIX = os.environ.get('REDIS_PREFIX', 'touchcalc:node:')
"""Key prefix under which path nodes are stored in Redis."""

REDIS_FAKE = os.environ.get('REDIS_FAKE', False)
"""Use the FakeRedis library instead of a redis service.

Useful for testing, dev, beta."""

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///touchcalc.db')
"""Database URI for the ``sql`` adapter."""

#################### Accounts ####################
PASSWORD_HASH_ITERATIONS = os.environ.get('PASSWORD_HASH_ITERATIONS',
                                          '260000')
"""PBKDF2 work factor for newly hashed passwords."""
