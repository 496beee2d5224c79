"""Tests for :mod:`touchcalc.storage.domain`."""

from unittest import TestCase

from .. import domain
from ..exceptions import InvalidPath


class TestToPath(TestCase):
    """:func:`.domain.to_path` normalizes and validates paths."""

    def test_tuple_and_list(self):
        """Any sequence of segments becomes a tuple."""
        self.assertEqual(domain.to_path(['home', 'users']), ('home', 'users'))
        self.assertEqual(domain.to_path(('home',)), ('home',))
        self.assertEqual(domain.to_path([]), domain.ROOT)

    def test_email_segment(self):
        """Addresses are fine as segments."""
        path = domain.to_path(['home', 'users', 'first.last+tag@x.co.uk'])
        self.assertEqual(domain.path_key(path),
                         'home/users/first.last+tag@x.co.uk')

    def test_bad_segments(self):
        """Empty, separator-bearing and relative segments are rejected."""
        for segments in [[''], ['a', 'b/c'], ['.'], ['a', '..'], [1],
                         'home', b'home']:
            with self.assertRaises(InvalidPath):
                domain.to_path(segments)

    def test_control_characters(self):
        """NUL and other control characters are rejected."""
        for segment in ['a\x00b', 'tab\there', 'bell\x07', 'del\x7f']:
            with self.assertRaises(InvalidPath):
                domain.to_path(['home', segment])
        self.assertTrue(domain.has_control_character('a\x00b'))
        self.assertFalse(domain.has_control_character('café ☃'))

    def test_segment_length(self):
        """Segments are limited by their encoded length."""
        longest = 'a' * domain.MAX_SEGMENT_BYTES
        self.assertEqual(domain.to_path([longest]), (longest,))
        for segment in [longest + 'a',
                        'é' * (domain.MAX_SEGMENT_BYTES // 2 + 1),
                        'lone \ud800 surrogate']:
            with self.assertRaises(InvalidPath):
                domain.to_path([segment])


class TestPathHelpers(TestCase):
    """Helpers for walking paths."""

    def test_parent_of(self):
        """The parent drops the last segment."""
        self.assertEqual(domain.parent_of(('a', 'b')), ('a',))
        self.assertEqual(domain.parent_of(('a',)), ())
        with self.assertRaises(InvalidPath):
            domain.parent_of(())

    def test_ancestors(self):
        """Ancestors run from the top down and include the path itself."""
        self.assertEqual(domain.ancestors(('a', 'b', 'c')),
                         (('a',), ('a', 'b'), ('a', 'b', 'c')))
        self.assertEqual(domain.ancestors(()), ())

    def test_path_key(self):
        """Segments are joined with the separator."""
        self.assertEqual(domain.path_key(('home', 'users')), 'home/users')
        self.assertEqual(domain.path_key(()), '')
