"""Tests for the click command line interface."""

import os
import re
import shutil
import tempfile
import unittest

os.environ.setdefault('FURNITURE_SEARCH_HUEY_DB',
                      os.path.join(tempfile.gettempdir(), 'furniture_search_test', 'huey_jobs.db'))

from click.testing import CliRunner

from cli.main import main
from fixtures.catalog_fixtures import build_sample_catalog
from storage.seed_synonyms import default_entries
from storage.sqlite_backend import SqliteCatalogStore


class CliTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.temp_dir, 'catalog.db')
        store = SqliteCatalogStore(self.db_path)
        build_sample_catalog(store)
        store.close()
        self.runner = CliRunner()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def invoke(self, *args, **kwargs):
        return self.runner.invoke(
            main, ['--project-root', self.temp_dir, '--db-path', self.db_path, *args], **kwargs
        )

    def invoke_ok(self, *args, **kwargs):
        result = self.invoke(*args, **kwargs)
        self.assertEqual(result.exit_code, 0, result.output)
        return result


class TestSearchCommand(CliTestCase):

    def test_plain_search(self):
        result = self.invoke_ok('search', 'wardrobe')
        self.assertIn('1 result(s), page 1/1', result.output)
        self.assertIn('Pine Wardrobe  [Storage]', result.output)

    def test_search_with_seeded_synonyms(self):
        self.invoke_ok('synonyms', 'seed')
        result = self.invoke_ok('search', 'couch')

        self.assertIn('Leather Couch', result.output)
        self.assertIn('Modern Sofa', result.output)
        self.assertNotIn('Office Chair', result.output)
        self.assertIn('Also searching for:', result.output)

    def test_french_locale(self):
        result = self.invoke_ok('--locale', 'fr', 'search', 'chaise')
        self.assertIn('Office Chair', result.output)
        self.assertIn('Translated: chaise -> chair', result.output)

    def test_json_output(self):
        result = self.invoke_ok('search', 'sofa', '--json')
        self.assertIn('"pagination"', result.output)
        self.assertIn('"Modern Sofa"', result.output)

    def test_short_query_is_empty(self):
        result = self.invoke_ok('search', 'a')
        self.assertIn('0 result(s)', result.output)

    def test_invalid_config_rejected(self):
        result = self.runner.invoke(main, ['--project-root', self.temp_dir, '--db-path', ' ', 'search', 'sofa'])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn('Invalid configuration', result.output)


class TestSynonymCommands(CliTestCase):

    def test_seed_is_idempotent(self):
        expected = len(default_entries())
        first = self.invoke_ok('synonyms', 'seed')
        self.assertIn(f'Seeded {expected} synonym(s), 0 already present', first.output)

        second = self.invoke_ok('synonyms', 'seed')
        self.assertIn(f'Seeded 0 synonym(s), {expected} already present', second.output)

    def test_add_list_update_deactivate_delete(self):
        added = self.invoke_ok('synonyms', 'add', 'Sofa', 'Chesterfield', '--weight', '0.7',
                               '--category-hint', 'seating')
        self.assertIn("Saved 'chesterfield' -> 'sofa'", added.output)
        synonym_id = re.search(r"\(id (\d+)\)", added.output).group(1)

        listed = self.invoke_ok('synonyms', 'list', '--search', 'chester')
        self.assertIn('1 synonym(s)', listed.output)
        self.assertIn('chesterfield -> sofa', listed.output)
        self.assertIn('[seating]', listed.output)

        self.invoke_ok('synonyms', 'update', synonym_id, '--weight', '0.5')
        self.assertIn('w=0.50', self.invoke_ok('synonyms', 'list', '--search', 'chester').output)

        self.invoke_ok('synonyms', 'deactivate', synonym_id)
        self.assertIn('(inactive)', self.invoke_ok('synonyms', 'list').output)

        self.invoke_ok('synonyms', 'delete', synonym_id, '--force')
        self.assertIn('0 synonym(s)', self.invoke_ok('synonyms', 'list').output)

    def test_added_synonym_expands_search(self):
        self.invoke_ok('synonyms', 'add', 'wardrobe', 'armoire')
        result = self.invoke_ok('search', 'armoire')
        self.assertIn('Pine Wardrobe', result.output)

    def test_add_rejects_invalid_entries(self):
        result = self.invoke('synonyms', 'add', 'sofa', 'Sofa')
        self.assertEqual(result.exit_code, 1)
        self.assertIn('Synonym must differ from its canonical term', result.output)

        result = self.invoke('synonyms', 'add', 'sofa', 'couch', '--weight', '1.5')
        self.assertEqual(result.exit_code, 1)
        self.assertIn('Weight must be greater than 0', result.output)

    def test_add_rejects_synonym_owned_by_another_term(self):
        self.invoke_ok('synonyms', 'add', 'sofa', 'couch')
        result = self.invoke('synonyms', 'add', 'bed', 'couch')
        self.assertEqual(result.exit_code, 1)
        self.assertIn('already an active synonym', result.output)

    def test_missing_entries(self):
        self.assertIn('not found', self.invoke('synonyms', 'deactivate', '999').output)
        self.assertIn('not found', self.invoke('synonyms', 'delete', '999', '--force').output)
        self.assertIn('not found', self.invoke('synonyms', 'update', '999', '--weight', '0.5').output)

    def test_update_needs_fields(self):
        result = self.invoke('synonyms', 'update', '1')
        self.assertEqual(result.exit_code, 2)
        self.assertIn('Nothing to update', result.output)

    def test_delete_confirmation(self):
        added = self.invoke_ok('synonyms', 'add', 'sofa', 'couch')
        synonym_id = re.search(r"\(id (\d+)\)", added.output).group(1)

        aborted = self.invoke('synonyms', 'delete', synonym_id, input='n\n')
        self.assertEqual(aborted.exit_code, 1)
        self.assertIn('1 synonym(s)', self.invoke_ok('synonyms', 'list').output)

        self.invoke_ok('synonyms', 'delete', synonym_id, input='y\n')
        self.assertIn('0 synonym(s)', self.invoke_ok('synonyms', 'list').output)


class TestAnalyticsCommands(CliTestCase):

    def test_popular_and_zero_results(self):
        self.invoke_ok('search', 'wardrobe')
        for _ in range(3):
            self.invoke_ok('search', 'hammock')

        popular = self.invoke_ok('analytics', 'popular')
        self.assertIn('hammock', popular.output)
        self.assertIn('wardrobe', popular.output)

        zero = self.invoke_ok('analytics', 'zero-results')
        self.assertIn('hammock', zero.output)
        self.assertNotIn('wardrobe', zero.output)

    def test_empty_reports(self):
        self.assertIn('No searches recorded', self.invoke_ok('analytics', 'popular').output)
        self.assertIn('[]', self.invoke_ok('analytics', 'zero-results', '--json').output)

    def test_cleanup(self):
        self.invoke_ok('search', 'wardrobe')
        result = self.invoke_ok('analytics', 'cleanup', '--retention-days', '30')
        self.assertIn('Removed 0 row(s) older than 30 days', result.output)


class TestDiscoveryCommands(CliTestCase):

    def test_analyze_without_history(self):
        self.assertIn('No suggestions', self.invoke_ok('discovery', 'analyze').output)

    def test_analyze_and_apply(self):
        self.invoke_ok('synonyms', 'add', 'wardrobe', 'armoire')
        for _ in range(3):
            self.invoke_ok('search', 'wardrbe')

        analyzed = self.invoke_ok('discovery', 'analyze')
        self.assertIn('[zero_result] wardrbe -> wardrobe', analyzed.output)

        applied = self.invoke_ok('discovery', 'apply')
        self.assertIn('1 suggestion(s): 0 created, 0 skipped', applied.output)


if __name__ == '__main__':
    unittest.main()
