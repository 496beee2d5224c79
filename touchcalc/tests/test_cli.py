"""Tests for :mod:`touchcalc.cli`."""

import logging
import shutil
import tempfile
from unittest import TestCase, mock

from click.testing import CliRunner

from .. import app_logging, config
from ..cli import cli


class TestCLI(TestCase):
    """The CLI drives the account service on the configured store."""

    def setUp(self):
        """Point the CLI at a filesystem store in a temporary directory."""
        self.root = tempfile.mkdtemp()
        self.runner = CliRunner(env={
            'STORAGE_BACKEND': 'filesystem',
            'STORAGE_ROOT': self.root,
            'PASSWORD_HASH_ITERATIONS': '10',
        })

    def tearDown(self):
        """Remove the temporary store and the CLI's log handler."""
        shutil.rmtree(self.root)
        if app_logging._handler is not None:
            logging.getLogger().removeHandler(app_logging._handler)
            app_logging._handler = None

    def invoke(self, *args, **kwargs):
        return self.runner.invoke(cli, list(args), **kwargs)

    def create(self, email='u@x.com', password='secret1'):
        return self.invoke('create-user', '--email', email,
                           '--password', password)

    def test_lifecycle(self):
        """An account can be created, confirmed, used and removed."""
        result = self.create()
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('Created u@x.com', result.output)

        result = self.invoke('authenticate', 'u@x.com', '--password',
                             'secret1')
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn('UserNotConfirmed', result.output)

        result = self.invoke('confirm-user', 'u@x.com')
        self.assertEqual(result.exit_code, 0, result.output)

        result = self.invoke('authenticate', 'u@x.com', '--password',
                             'secret1')
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('OK', result.output)

        result = self.invoke('authenticate', 'u@x.com', '--password', 'nope')
        self.assertNotEqual(result.exit_code, 0)

        result = self.invoke('set-password', 'u@x.com', '--password',
                             'secret2')
        self.assertEqual(result.exit_code, 0, result.output)
        result = self.invoke('authenticate', 'u@x.com', '--password',
                             'secret2')
        self.assertEqual(result.exit_code, 0, result.output)

        result = self.invoke('delete-user', 'u@x.com', '--yes')
        self.assertEqual(result.exit_code, 0, result.output)
        result = self.invoke('exists', 'u@x.com')
        self.assertEqual(result.output.strip(), 'no')

    def test_prompts(self):
        """Missing options are prompted for."""
        result = self.invoke('create-user',
                             input='u@x.com\nsecret1\nsecret1\n')
        self.assertEqual(result.exit_code, 0, result.output)
        result = self.invoke('exists', 'u@x.com')
        self.assertEqual(result.output.strip(), 'yes')

    def test_dongle(self):
        """The device token can be set and read back."""
        self.create()
        result = self.invoke('set-dongle', 'u@x.com', 'token-A')
        self.assertEqual(result.exit_code, 0, result.output)
        result = self.invoke('get-dongle', 'u@x.com')
        self.assertEqual(result.output.strip(), 'token-A')

    def test_duplicate(self):
        """Creating an account twice fails the second time."""
        self.create()
        result = self.create()
        self.assertEqual(result.exit_code, 1)
        self.assertIn('UserAlreadyExists', result.output)

    def test_missing_user(self):
        """Operations on unknown accounts fail cleanly."""
        result = self.invoke('confirm-user', 'ghost@x.com')
        self.assertEqual(result.exit_code, 1)
        self.assertIn('UserNotFound', result.output)
        result = self.invoke('delete-user', 'ghost@x.com', '--yes')
        self.assertEqual(result.exit_code, 1)
        self.assertIn('UserDoesNotExist', result.output)

    def test_bad_backend(self):
        """A misconfigured backend is reported, not a traceback."""
        result = self.runner.invoke(cli, ['exists', 'u@x.com'],
                                    env={'STORAGE_BACKEND': 'mongo'})
        self.assertEqual(result.exit_code, 1)
        self.assertIn('Cannot open storage', result.output)

    def test_version(self):
        """The CLI reports the package version."""
        result = self.invoke('--version')
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('0.1.0', result.output)

    @mock.patch('touchcalc.cli.setup_logger')
    def test_loglevel(self, mock_setup_logger):
        """The log level defaults to the configured ``LOGLEVEL``."""
        self.invoke('exists', 'u@x.com')
        mock_setup_logger.assert_called_once_with(str(config.LOGLEVEL))
        mock_setup_logger.reset_mock()
        self.invoke('--loglevel', 'debug', 'exists', 'u@x.com')
        mock_setup_logger.assert_called_once_with('debug')
