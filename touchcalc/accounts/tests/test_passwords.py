"""Tests for :mod:`touchcalc.accounts.passwords`."""

import string
from unittest import TestCase

from hypothesis import given, settings
from hypothesis import strategies as st

from .. import passwords
from ..exceptions import PasswordAuthenticationFailed

ROUNDS = 10


class TestCheckPassword(TestCase):
    """Tests passwords."""

    @given(st.text(alphabet=string.printable))
    @settings(max_examples=200)
    def test_check_passwords_successful(self, passw):
        encrypted = passwords.hash_password(passw, iterations=ROUNDS)
        self.assertTrue(passwords.check_password(passw, encrypted),
                        f"should work for password '{passw}'")

    @given(st.text(alphabet=string.printable),
           st.text(alphabet=st.characters()))
    @settings(max_examples=500)
    def test_check_passwords_fuzz(self, passw, fuzzpw):
        encrypted = passwords.hash_password(passw, iterations=ROUNDS)
        if passw == fuzzpw:
            self.assertTrue(passwords.check_password(fuzzpw, encrypted))
        else:
            with self.assertRaises(PasswordAuthenticationFailed):
                passwords.check_password(fuzzpw, encrypted)

    def test_salted(self):
        """The same password hashes differently every time."""
        self.assertNotEqual(passwords.hash_password('pw', iterations=ROUNDS),
                            passwords.hash_password('pw', iterations=ROUNDS))

    def test_format(self):
        """The hash records its algorithm and work factor."""
        algorithm, rounds, _ = \
            passwords.hash_password('pw', iterations=ROUNDS).split('$')
        self.assertEqual(algorithm, 'pbkdf2_sha256')
        self.assertEqual(int(rounds), ROUNDS)

    def test_malformed_hash(self):
        """Anything that is not one of our hashes never matches."""
        for encrypted in ['', 'plaintext', 'md5$10$AAAA', 'pbkdf2_sha256$x$AA',
                          'pbkdf2_sha256$10$!!!', 'pbkdf2_sha256$10$AAAA',
                          'pbkdf2_sha256$0$' + 'A' * 64, None]:
            with self.assertRaises(PasswordAuthenticationFailed):
                passwords.check_password('pw', encrypted)
