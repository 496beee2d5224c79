"""Tests for :mod:`touchcalc.storage.document`."""

import json
from unittest import TestCase, mock

import fakeredis
import redis

from ..document import RedisStore, get_redis_store
from ..exceptions import BackendUnavailable, Corrupt
from .contract import StoreContractMixin


class TestRedisStore(StoreContractMixin, TestCase):
    """:class:`.RedisStore` satisfies the path store contract."""

    def setUp(self):
        """Give every test its own fake Redis server."""
        self.r = fakeredis.FakeStrictRedis(server=fakeredis.FakeServer())
        self.store = RedisStore(self.r, prefix='test:')

    def test_documents(self):
        """Each node is one JSON document under the prefixed key."""
        self.store.create_directory(('home',))
        self.store.create_file(('home', 'f'), 'payload')
        self.assertEqual(json.loads(self.r.get('test:home')),
                         {'type': 'dir'})
        self.assertEqual(json.loads(self.r.get('test:home/f')),
                         {'type': 'file', 'version': 1, 'data': 'payload'})

    def test_prefixes_do_not_collide(self):
        """Stores with different prefixes on one server are independent."""
        other = RedisStore(self.r, prefix='other:')
        self.store.create_directory(('home',))
        self.store.create_file(('home', 'f'), 'mine')
        self.assertIsNone(other.get_file(('home', 'f')))

    def test_corrupt_document(self):
        """A value that is not a node document is reported as corrupt."""
        self.r.set('test:home/f', b'\x00garbage')
        with self.assertRaises(Corrupt):
            self.store.get_file(('home', 'f'))
        self.r.set('test:home/g', json.dumps({'type': 'file', 'data': 'x'}))
        with self.assertRaises(Corrupt):
            self.store.get_file(('home', 'g'))
        self.r.set('test:home/h', json.dumps({'type': 'symlink'}))
        with self.assertRaises(Corrupt):
            self.store.get_file(('home', 'h'))

    def test_connection_failed(self):
        """:class:`.BackendUnavailable` is raised when Redis is down."""
        with mock.patch.object(self.r, 'get') as mock_get:
            mock_get.side_effect = redis.exceptions.ConnectionError
            with self.assertRaises(BackendUnavailable):
                self.store.get_file(('home', 'f'))
        with mock.patch.object(self.r, 'set') as mock_set:
            mock_set.side_effect = redis.exceptions.TimeoutError
            with self.assertRaises(BackendUnavailable):
                self.store.create_directory(('home',))

    def test_transaction_failed(self):
        """Failures inside a transaction are translated too."""
        self.store.create_directory(('home',))
        self.store.create_file(('home', 'f'), 'x')
        with mock.patch.object(self.r, 'transaction') as mock_transaction:
            mock_transaction.side_effect = redis.exceptions.ConnectionError
            with self.assertRaises(BackendUnavailable):
                self.store.update_file(('home', 'f'), 'y')
            with self.assertRaises(BackendUnavailable):
                self.store.delete_file(('home', 'f'))


class TestGetRedisStore(TestCase):
    """:func:`.get_redis_store` builds a store from connection settings."""

    @mock.patch('touchcalc.storage.document.redis.StrictRedis')
    def test_real_connection(self, mock_strict_redis):
        """Connection parameters are passed through to the client."""
        store = get_redis_store('redis', 1234, 4, timeout=2.0, prefix='p:')
        mock_strict_redis.assert_called_once_with(
            host='redis', port=1234, db=4, socket_timeout=2.0,
            socket_connect_timeout=2.0
        )
        self.assertEqual(store.prefix, 'p:')

    def test_fake_connection(self):
        """The fake flag gives a working in-process store."""
        store = get_redis_store('ignored', 0, 0, fake=True, prefix='fake:')
        store.create_directory(('home',))
        store.create_file(('home', 'f'), 'x')
        self.assertEqual(store.get_file(('home', 'f')).data, 'x')
