"""Tests for FTS5QueryBuilder."""

import unittest
from search.query_builder import FTS5QueryBuilder


class TestFTS5QueryBuilder(unittest.TestCase):
    """Test FTS5QueryBuilder functionality."""

    def setUp(self):
        self.builder = FTS5QueryBuilder()

    def test_terms_are_or_combined_with_prefix(self):
        self.assertEqual(
            self.builder.build_match_query(['couch', 'sofa']),
            '"couch"* OR "sofa"*'
        )

    def test_multi_word_term_becomes_phrase(self):
        self.assertEqual(
            self.builder.build_match_query(['modern couch', 'couch']),
            '"modern couch"* OR "couch"*'
        )

    def test_operators_stripped_and_deduplicated(self):
        self.assertEqual(self.builder.build_match_query(['sofa"', '-sofa', 'sofa']), '"sofa"*')
        self.assertEqual(self.builder.build_match_query(['(chair)']), '"chair"*')

    def test_nothing_left(self):
        self.assertEqual(self.builder.build_match_query([]), '')
        self.assertEqual(self.builder.build_match_query(['a', '++', '*']), '')

    def test_without_prefix_match(self):
        builder = FTS5QueryBuilder(prefix_match=False)
        self.assertEqual(builder.build_match_query(['couch']), '"couch"')

    def test_like_patterns(self):
        self.assertEqual(
            self.builder.build_like_patterns(['couch', ' couch ', 'sofa']),
            ['%couch%', '%sofa%']
        )

    def test_like_patterns_escape_wildcards(self):
        self.assertEqual(self.builder.build_like_patterns(['50%_off']), ['%50\\%\\_off%'])


if __name__ == '__main__':
    unittest.main()
