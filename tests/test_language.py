"""Tests for French detection and translation."""

import unittest

from search.language import LanguageSupport, Translation, remove_accents


class TestDetectLanguage(unittest.TestCase):

    def setUp(self):
        self.language = LanguageSupport()

    def test_french_furniture_word(self):
        self.assertEqual(self.language.detect_language('chaise'), 'fr')

    def test_accented_word(self):
        self.assertEqual(self.language.detect_language('canapé'), 'fr')

    def test_marker_words(self):
        self.assertEqual(self.language.detect_language('salle de bain'), 'fr')

    def test_english_query(self):
        self.assertEqual(self.language.detect_language('oak desk'), 'en')
        self.assertEqual(self.language.detect_language('wardrobe'), 'en')


class TestTranslateQuery(unittest.TestCase):

    def setUp(self):
        self.language = LanguageSupport()

    def test_english_locale_passes_through(self):
        result = self.language.translate_query('chaise', locale='en')
        self.assertEqual(result, Translation('chaise', ['chaise'], 'en'))
        self.assertFalse(result.is_translated)

    def test_single_word(self):
        result = self.language.translate_query('chaise', locale='fr')
        self.assertEqual(result.translated, 'chair')
        self.assertEqual(result.terms, ['chair', 'chaise'])
        self.assertTrue(result.is_translated)

    def test_accent_insensitive(self):
        self.assertEqual(self.language.translate_query('canapé', locale='fr').translated, 'sofa')
        self.assertEqual(self.language.translate_query('canape', locale='fr').translated, 'sofa')

    def test_multi_word_phrase(self):
        result = self.language.translate_query('salle de bain', locale='fr')
        self.assertEqual(result.translated, 'bathroom')
        self.assertEqual(result.terms, ['bathroom', 'salle de bain'])

    def test_accented_phrase(self):
        result = self.language.translate_query('salle à manger', locale='fr')
        self.assertEqual(result.translated, 'dining room')

    def test_word_by_word(self):
        result = self.language.translate_query('Chaise Moderne', locale='fr')
        self.assertEqual(result.translated, 'chair modern')
        self.assertEqual(result.terms, ['chair modern', 'chaise moderne', 'chaise', 'moderne'])

    def test_english_query_under_french_locale(self):
        result = self.language.translate_query('oak desk', locale='fr')
        self.assertEqual(result.original_lang, 'en')
        self.assertEqual(result.terms, ['oak desk'])

    def test_to_dict(self):
        result = self.language.translate_query('lampe', locale='fr')
        self.assertEqual(result.to_dict(), {
            'translated': 'lamp',
            'terms': ['lamp', 'lampe'],
            'original_lang': 'fr'
        })


class TestHelpers(unittest.TestCase):

    def test_remove_accents(self):
        self.assertEqual(remove_accents('étagère'), 'etagere')
        self.assertEqual(remove_accents('plain'), 'plain')

    def test_french_equivalents(self):
        equivalents = LanguageSupport().get_french_equivalents('sofa')
        self.assertIn('canapé', equivalents)
        self.assertIn('canape', equivalents)


if __name__ == '__main__':
    unittest.main()
