"""Tests for synonym administration."""

import os
import shutil
import tempfile
import unittest
from unittest.mock import Mock

from search.exceptions import DuplicateSynonymError, SynonymValidationError
from search.synonym_admin import SynonymAdmin, validate_entry_fields
from search.synonym_index import SynonymIndex
from storage.sqlite_backend import SqliteCatalogStore
from storage.synonym_store import SqliteSynonymStore


class TestValidateEntryFields(unittest.TestCase):

    def test_valid(self):
        self.assertEqual(validate_entry_fields({'canonical': 'sofa', 'synonym': 'couch',
                                                'weight': 0.9, 'language': 'en'}), [])

    def test_required(self):
        errors = validate_entry_fields({})
        self.assertIn("Canonical is required", errors)
        self.assertIn("Synonym is required", errors)

    def test_partial_skips_required(self):
        self.assertEqual(validate_entry_fields({'weight': 0.5}, partial=True), [])

    def test_empty_and_too_long(self):
        errors = validate_entry_fields({'canonical': '  ', 'synonym': 'x' * 101})
        self.assertEqual(errors, ["Canonical cannot be empty",
                                  "Synonym too long (max 100 characters)"])

    def test_synonym_equal_to_canonical(self):
        errors = validate_entry_fields({'canonical': 'Sofa', 'synonym': 'sofa '})
        self.assertEqual(errors, ["Synonym must differ from its canonical term"])

    def test_weight_bounds(self):
        self.assertEqual(validate_entry_fields({'weight': 1.0}, partial=True), [])
        self.assertTrue(validate_entry_fields({'weight': 0}, partial=True))
        self.assertTrue(validate_entry_fields({'weight': 1.01}, partial=True))
        self.assertTrue(validate_entry_fields({'weight': 'heavy'}, partial=True))

    def test_language(self):
        self.assertEqual(validate_entry_fields({'language': 'de'}, partial=True),
                         ["Invalid language: de"])


class TestSynonymAdmin(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.catalog = SqliteCatalogStore(os.path.join(self.temp_dir, 'catalog.db'))
        self.store = SqliteSynonymStore(self.catalog.connection_pool)
        self.index = SynonymIndex(self.store)
        self.fuzzy = Mock()
        self.admin = SynonymAdmin(self.store, self.index, self.fuzzy)

    def tearDown(self):
        self.catalog.close()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_create_normalizes_and_invalidates(self):
        self.assertEqual(self.index.expand('couch').terms, ['couch'])

        entry = self.admin.create(' Sofa ', 'COUCH', weight=0.9, category_hint=' seating ')

        self.assertIsNotNone(entry.id)
        self.assertEqual((entry.canonical, entry.synonym), ('sofa', 'couch'))
        self.assertEqual(entry.category_hint, 'seating')
        self.assertEqual(self.index.expand('couch').terms, ['couch', 'sofa'])
        self.fuzzy.clear_cache.assert_called_once()

    def test_create_invalid(self):
        with self.assertRaises(SynonymValidationError) as ctx:
            self.admin.create('sofa', 'sofa', weight=2)
        self.assertIn("Weight must be greater than 0", str(ctx.exception))
        self.fuzzy.clear_cache.assert_not_called()

    def test_create_duplicate_active_synonym(self):
        self.admin.create('sofa', 'couch')
        with self.assertRaises(DuplicateSynonymError):
            self.admin.create('bench', 'couch')

    def test_update(self):
        entry = self.admin.create('sofa', 'couch', weight=0.9)
        self.assertTrue(self.admin.update(entry.id, weight=0.4))
        self.assertEqual(self.admin.get(entry.id).weight, 0.4)
        self.assertFalse(self.admin.update(12345, weight=0.4))

    def test_update_invalid(self):
        entry = self.admin.create('sofa', 'couch')
        with self.assertRaises(SynonymValidationError):
            self.admin.update(entry.id, language='es')

    def test_update_single_term_must_differ_from_stored_pair(self):
        entry = self.admin.create('sofa', 'couch')
        with self.assertRaises(SynonymValidationError):
            self.admin.update(entry.id, canonical=' Couch ')
        with self.assertRaises(SynonymValidationError):
            self.admin.update(entry.id, synonym='SOFA')
        self.assertEqual(self.admin.get(entry.id).canonical, 'sofa')

        self.assertTrue(self.admin.update(entry.id, canonical='divan'))
        self.assertEqual(self.admin.get(entry.id).canonical, 'divan')
        self.assertFalse(self.admin.update(12345, synonym='settee'))

    def test_deactivate_stops_expansion(self):
        entry = self.admin.create('sofa', 'couch')
        self.assertIn('sofa', self.index.expand('couch').terms)

        self.assertTrue(self.admin.deactivate(entry.id))
        self.assertEqual(self.index.expand('couch').terms, ['couch'])
        self.assertFalse(self.admin.get(entry.id).active)

    def test_delete(self):
        entry = self.admin.create('sofa', 'couch')
        self.assertTrue(self.admin.delete(entry.id))
        self.assertIsNone(self.admin.get(entry.id))
        self.assertFalse(self.admin.delete(entry.id))

    def test_list_clamps_page_size(self):
        for synonym in ['couch', 'settee']:
            self.admin.create('sofa', synonym)
        entries, total = self.admin.list(page=0, per_page=1000, search='sett')
        self.assertEqual(total, 1)
        self.assertEqual(entries[0].synonym, 'settee')

        store = Mock()
        store.list_synonyms.return_value = ([], 0)
        SynonymAdmin(store).list(page=-3, per_page=1000)
        request = store.list_synonyms.call_args[0][0]
        self.assertEqual((request.page, request.per_page), (1, 100))


if __name__ == '__main__':
    unittest.main()
