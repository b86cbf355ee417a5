"""Tests for QueryExpander."""

import unittest

from search.query_expander import QueryExpander
from search.synonym_index import SynonymIndex
from fixtures.catalog_fixtures import FakeSynonymStore, sofa_entries


class TestQueryExpander(unittest.TestCase):

    def setUp(self):
        store = FakeSynonymStore(sofa_entries())
        self.expander = QueryExpander(SynonymIndex(store))

    def test_single_word(self):
        expanded = self.expander.expand('couch')
        self.assertEqual(expanded.weighted_terms, {'couch': 1.0, 'sofa': 0.95, 'settee': 0.8})
        self.assertEqual(expanded.original, 'couch')
        self.assertFalse(expanded.is_translated)

    def test_whitespace_and_case_normalized(self):
        expanded = self.expander.expand('  Modern    Couch ')
        self.assertEqual(expanded.original, 'modern couch')
        self.assertEqual(expanded.original_terms, ['modern', 'couch'])

    def test_multi_word_phrase_first_and_decayed(self):
        expanded = self.expander.expand('modern couch')
        self.assertEqual(expanded.terms, ['modern couch', 'modern', 'couch', 'sofa', 'settee'])
        self.assertEqual(expanded.weight('modern couch'), 1.0)
        self.assertEqual(expanded.weight('couch'), 1.0)
        self.assertAlmostEqual(expanded.weight('sofa'), 0.855)
        self.assertAlmostEqual(expanded.weight('settee'), 0.72)

    def test_edge_punctuation_does_not_block_expansion(self):
        self.assertEqual(self.expander.expand('couch,').terms, ['couch', 'sofa', 'settee'])

        expanded = self.expander.expand('modern sofa!')
        self.assertIn('couch', expanded.terms)
        self.assertEqual(expanded.terms[0], 'modern sofa!')

    def test_punctuation_only_query_kept_verbatim(self):
        self.assertEqual(self.expander.expand('?!').terms, ['?!'])

    def test_cap(self):
        expanded = self.expander.expand('modern couch', max_terms=3)
        self.assertEqual(expanded.terms, ['modern couch', 'modern', 'couch'])
        self.assertEqual(expanded.capped_at, 3)

    def test_short_query(self):
        expanded = self.expander.expand('a')
        self.assertEqual(expanded.weighted_terms, {'a': 1.0})

    def test_french_query(self):
        expanded = self.expander.expand('canapé', locale='fr')
        self.assertEqual(expanded.language, 'fr')
        self.assertEqual(expanded.translated_query, 'sofa')
        self.assertEqual(expanded.terms, ['canapé', 'sofa', 'couch', 'settee'])
        self.assertEqual(expanded.weight('canapé'), 1.0)
        self.assertEqual(expanded.weight('sofa'), 0.95)

    def test_french_query_under_english_locale(self):
        expanded = self.expander.expand('canapé', locale='en')
        self.assertEqual(expanded.language, 'en')
        self.assertIsNone(expanded.translated_query)
        self.assertEqual(expanded.terms, ['canapé'])

    def test_translation_disabled(self):
        expanded = self.expander.expand('canapé', locale='fr', use_translation=False)
        self.assertIsNone(expanded.translated_query)

    def test_fuzzy_alternatives_reported_separately(self):
        expanded = self.expander.expand('sofaa', use_fuzzy=True)
        self.assertEqual(expanded.fuzzy_alternatives, ['sofa'])
        self.assertNotIn('sofa', expanded.weighted_terms)

    def test_no_fuzzy_by_default(self):
        self.assertEqual(self.expander.expand('sofaa').fuzzy_alternatives, [])

    def test_to_dict(self):
        data = self.expander.expand('canapé', locale='fr').to_dict()
        self.assertEqual(data['translated'], 'sofa')
        self.assertEqual(data['terms'][0], 'canapé')


if __name__ == '__main__':
    unittest.main()
